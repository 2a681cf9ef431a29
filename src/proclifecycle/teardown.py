"""
Teardown helpers for end-to-end harnesses.

Each ``wait_for_*`` helper wraps the convergence poller around one probe and
raises ``ConvergenceTimeoutError`` naming the probe and its target when the
condition never holds, so a failing test reports which pid, port or address
was stuck. Timeouts and intervals default to the configured settings.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import load_settings
from .convergence_poller import ConvergenceProbe, describe_probe, wait_until
from .exceptions import ConvergenceTimeoutError, NoSuchProcessError, PortQueryError
from .probes import (
    DEFAULT_HOST,
    AddressLister,
    DescribedProbe,
    HealthCheck,
    address_healthy,
    address_removed,
    address_unhealthy,
    port_closed,
    ports_closed,
    process_exited,
)
from .process_controller import PortLookupStatus, TerminationMode, lookup_port, terminate

logger = logging.getLogger(__name__)


async def _wait_or_raise(
    probe: ConvergenceProbe,
    *,
    target: object,
    timeout: Optional[float],
    interval: Optional[float],
    deadline: Optional[float],
) -> None:
    settings = load_settings()
    timeout = settings.convergence_timeout_seconds if timeout is None else timeout
    interval = settings.poll_interval_seconds if interval is None else interval

    if await wait_until(probe, interval, timeout, deadline=deadline):
        return

    description = describe_probe(probe)
    logger.warning("Timed out after %ss waiting for %s", timeout, description)
    raise ConvergenceTimeoutError(probe=description, target=target, timeout=timeout)


async def wait_for_address_healthy(
    address: str,
    health_check: HealthCheck,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    deadline: Optional[float] = None,
) -> None:
    """Wait until ``address`` answers ``health_check`` (used after starting an instance)."""
    await _wait_or_raise(
        address_healthy(address, health_check),
        target=address,
        timeout=timeout,
        interval=interval,
        deadline=deadline,
    )


async def wait_for_address_unhealthy(
    address: str,
    health_check: HealthCheck,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    deadline: Optional[float] = None,
) -> None:
    """Wait until ``address`` stops answering ``health_check``."""
    await _wait_or_raise(
        address_unhealthy(address, health_check),
        target=address,
        timeout=timeout,
        interval=interval,
        deadline=deadline,
    )


async def wait_for_address_removed(
    address: str,
    list_addresses: AddressLister,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    deadline: Optional[float] = None,
) -> None:
    """Wait until ``address`` disappears from the registry listing."""
    await _wait_or_raise(
        address_removed(address, list_addresses),
        target=address,
        timeout=timeout,
        interval=interval,
        deadline=deadline,
    )


async def wait_for_ports_closed(
    *ports: int,
    host: str = DEFAULT_HOST,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    deadline: Optional[float] = None,
) -> None:
    """Wait until every port in ``ports`` refuses connections in the same check."""
    await _wait_or_raise(
        ports_closed(ports, host),
        target=list(ports),
        timeout=timeout,
        interval=interval,
        deadline=deadline,
    )


async def wait_for_process_exit(
    pid: int,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    deadline: Optional[float] = None,
) -> None:
    """Wait until ``pid`` is gone."""
    await _wait_or_raise(
        process_exited(pid),
        target=pid,
        timeout=timeout,
        interval=interval,
        deadline=deadline,
    )


def _port_released(port: int, host: str) -> DescribedProbe:
    """Holds once the listener table shows no listener on ``port`` and ``host:port`` refuses dials.

    The table covers every interface; the dial alone misses listeners bound elsewhere (e.g. ``::1``).
    """
    dial_refused = port_closed(port, host)

    async def check() -> bool:
        binding = lookup_port(port)
        if binding.status is not PortLookupStatus.NOT_FOUND:
            logger.debug("Port %s still %s (pid=%s)", port, binding.status.value, binding.pid)
            return False
        return await dial_refused()

    return DescribedProbe(f"port {port} released", check)


async def release_port(
    port: int,
    *,
    mode: TerminationMode = TerminationMode.FORCED,
    host: str = DEFAULT_HOST,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
) -> Optional[int]:
    """
    Terminate whatever listens on ``port`` and wait for the port to close.

    Returns:
        The pid that was terminated, or None when nothing was listening

    Raises:
        PortQueryError: The listener could not be resolved
        ConvergenceTimeoutError: The port stayed open after termination
        ProcessLifecycleError: Termination itself failed
    """
    binding = lookup_port(port)
    if binding.status is PortLookupStatus.NOT_FOUND:
        logger.info("Port %s has no listener; nothing to release", port)
        return None
    if binding.status is PortLookupStatus.QUERY_FAILED:
        raise PortQueryError(f"Failed to query listener on port {port}: {binding.error}", port=port)

    assert binding.pid is not None
    try:
        terminate(binding.pid, mode)
    except NoSuchProcessError:
        # Listener exited between lookup and termination
        logger.info("Listener %s on port %s exited before termination", binding.pid, port)

    await _wait_or_raise(
        _port_released(port, host),
        target=port,
        timeout=timeout,
        interval=interval,
        deadline=None,
    )
    logger.info("Released port %s (pid %s)", port, binding.pid)
    return binding.pid


async def terminate_with_escalation(
    pid: int,
    *,
    graceful_timeout: Optional[float] = None,
    interval: Optional[float] = None,
) -> TerminationMode:
    """
    Ask ``pid`` to stop gracefully, then force it if it outlives the grace period.

    Returns:
        The mode of the request that ended the process

    Raises:
        NoSuchProcessError: The process did not exist when first asked to stop
        ConvergenceTimeoutError: The process survived the forced request too
    """
    settings = load_settings()
    graceful_timeout = settings.graceful_timeout_seconds if graceful_timeout is None else graceful_timeout
    interval = settings.poll_interval_seconds if interval is None else interval

    terminate(pid, TerminationMode.GRACEFUL)
    if await wait_until(process_exited(pid), interval, graceful_timeout):
        logger.info("Process %s terminated gracefully", pid)
        return TerminationMode.GRACEFUL

    logger.warning("Process %s did not terminate within %ss; forcing", pid, graceful_timeout)
    try:
        terminate(pid, TerminationMode.FORCED)
    except NoSuchProcessError:
        logger.info("Process %s exited before forced termination", pid)
        return TerminationMode.GRACEFUL

    await wait_for_process_exit(pid, interval=interval)
    logger.info("Process %s force killed", pid)
    return TerminationMode.FORCED


__all__ = [
    "release_port",
    "terminate_with_escalation",
    "wait_for_address_healthy",
    "wait_for_address_removed",
    "wait_for_address_unhealthy",
    "wait_for_ports_closed",
    "wait_for_process_exit",
]
