"""Shared probe wrapper and awaitable helpers."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar, Union

T = TypeVar("T")

MaybeAwaitable = Union[T, Awaitable[T]]


async def resolve(value: MaybeAwaitable[T]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass(frozen=True)
class DescribedProbe:
    """A convergence probe that carries a description for logs and errors."""

    description: str
    check: Callable[[], MaybeAwaitable[bool]]

    def __call__(self) -> MaybeAwaitable[bool]:
        return self.check()

    def __str__(self) -> str:
        return self.description
