"""
Convergence poller: wait until a probe holds or a timeout elapses.

The probe is any zero-argument callable returning a bool, or an awaitable
resolving to one. It is evaluated immediately, then after every ``interval``
until it reports success or the timeout is spent. Transient errors raised by
the probe count as "not yet satisfied"; running out of time is reported as
``False``, never raised.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Awaitable, Callable, Optional, Union

import aiohttp

logger = logging.getLogger(__name__)

ConvergenceProbe = Callable[[], Union[bool, Awaitable[bool]]]

PROBE_ERRORS = (
    OSError,
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
    RuntimeError,
    aiohttp.ClientError,
)


def describe_probe(probe: ConvergenceProbe) -> str:
    """Human-readable name for log lines and error messages."""
    description = getattr(probe, "description", None)
    if description:
        return str(description)
    return getattr(probe, "__qualname__", None) or repr(probe)


async def evaluate_probe(probe: ConvergenceProbe) -> bool:
    """Run ``probe`` once, mapping transient errors to ``False``."""
    try:
        result = probe()
        if inspect.isawaitable(result):
            result = await result
    except PROBE_ERRORS as exc:
        logger.debug("Probe %s raised %r; treating as not yet satisfied", describe_probe(probe), exc)
        return False
    return bool(result)


def _validate_timing(interval: float, timeout: float) -> None:
    if interval <= 0:
        raise ValueError(f"Poll interval must be positive (got {interval})")
    if timeout < 0:
        raise ValueError(f"Timeout must not be negative (got {timeout})")


async def wait_until(
    probe: ConvergenceProbe,
    interval: float,
    timeout: float,
    *,
    deadline: Optional[float] = None,
) -> bool:
    """
    Block the calling task until ``probe`` holds or ``timeout`` seconds pass.

    Args:
        probe: Zero-argument predicate, sync or async
        interval: Seconds to sleep between evaluations
        timeout: Seconds to keep trying after the first evaluation
        deadline: Optional absolute ``time.monotonic()`` value that cuts the
            wait short, e.g. an enclosing test's overall budget

    Returns:
        True as soon as the probe holds, False once the time is spent. The
        probe is evaluated one last time when the deadline is reached.

    Raises:
        ValueError: interval is not positive or timeout is negative
    """
    _validate_timing(interval, timeout)

    started = time.monotonic()
    stop_at = started + timeout
    if deadline is not None:
        stop_at = min(stop_at, deadline)

    attempts = 0
    while True:
        attempts += 1
        if await evaluate_probe(probe):
            logger.debug(
                "Probe %s converged after %d attempt(s) in %.3fs",
                describe_probe(probe),
                attempts,
                time.monotonic() - started,
            )
            return True

        remaining = stop_at - time.monotonic()
        if remaining <= 0:
            logger.debug(
                "Probe %s did not converge after %d attempt(s) in %.3fs",
                describe_probe(probe),
                attempts,
                time.monotonic() - started,
            )
            return False

        await asyncio.sleep(min(interval, remaining))


def wait_until_sync(
    probe: ConvergenceProbe,
    interval: float,
    timeout: float,
    *,
    deadline: Optional[float] = None,
) -> bool:
    """Synchronous form of :func:`wait_until` for callers without an event loop.

    Raises:
        RuntimeError: If called while an event loop is already running.
    """

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # No running loop, expected from synchronous callers
        loop = None

    if loop is not None and loop.is_running():
        raise RuntimeError("wait_until_sync cannot run inside an active event loop. Await wait_until instead.")

    return asyncio.run(wait_until(probe, interval, timeout, deadline=deadline))


__all__ = [
    "ConvergenceProbe",
    "PROBE_ERRORS",
    "describe_probe",
    "evaluate_probe",
    "wait_until",
    "wait_until_sync",
]
