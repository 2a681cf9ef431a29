"""Probes over collaborator-supplied health and registry capabilities."""

from __future__ import annotations

from typing import Callable, Iterable

from .types import DescribedProbe, MaybeAwaitable, resolve

HealthCheck = Callable[[str], MaybeAwaitable[bool]]
AddressLister = Callable[[], MaybeAwaitable[Iterable[str]]]


def address_healthy(address: str, health_check: HealthCheck) -> DescribedProbe:
    """Probe that holds once ``address`` answers its health check."""

    async def check() -> bool:
        return bool(await resolve(health_check(address)))

    return DescribedProbe(f"{address} healthy", check)


def address_unhealthy(address: str, health_check: HealthCheck) -> DescribedProbe:
    """Probe that holds once ``address`` stops answering its health check.

    A health check that raises is inconclusive, not unhealthy.
    """

    async def check() -> bool:
        return not await resolve(health_check(address))

    return DescribedProbe(f"{address} unhealthy", check)


def address_removed(address: str, list_addresses: AddressLister) -> DescribedProbe:
    """Probe that holds once ``address`` is absent from the registry listing."""

    async def check() -> bool:
        active = await resolve(list_addresses())
        return address not in set(active)

    return DescribedProbe(f"{address} removed from registry", check)
