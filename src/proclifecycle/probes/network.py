"""TCP reachability probes."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from ..config import load_settings
from ..process_controller_helpers.validation import validate_port
from .types import DescribedProbe

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"


async def port_accepts_connections(host: str, port: int, *, timeout: Optional[float] = None) -> bool:
    """
    Try one TCP connection to ``host:port``.

    Returns False when the connection is refused or the dial times out.
    Other socket errors (e.g. a reset mid-dial) propagate so that callers can
    treat them as inconclusive.
    """
    if timeout is None:
        timeout = load_settings().connect_timeout_seconds
    try:
        _reader, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
    except ConnectionRefusedError:
        return False
    except asyncio.TimeoutError:
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except (ConnectionError, OSError) as exc:
        logger.debug("Closing probe connection to %s:%s failed: %s", host, port, exc)
    return True


def port_closed(port: int, host: str = DEFAULT_HOST, *, connect_timeout: Optional[float] = None) -> DescribedProbe:
    """Probe that holds while nothing accepts TCP connections on ``host:port``."""
    port = validate_port(port)

    async def check() -> bool:
        return not await port_accepts_connections(host, port, timeout=connect_timeout)

    return DescribedProbe(f"port {host}:{port} closed", check)


def ports_closed(
    ports: Iterable[int],
    host: str = DEFAULT_HOST,
    *,
    connect_timeout: Optional[float] = None,
) -> DescribedProbe:
    """
    Probe that holds only when every port is closed in the same evaluation.

    Each evaluation dials all ports concurrently; a port that closed during an
    earlier evaluation but has reopened counts as open.
    """
    checked = tuple(dict.fromkeys(validate_port(port) for port in ports))
    if not checked:
        raise ValueError("ports_closed needs at least one port")

    async def check() -> bool:
        results = await asyncio.gather(
            *(port_accepts_connections(host, port, timeout=connect_timeout) for port in checked),
            return_exceptions=True,
        )
        # Every dial has finished; surface the first failure
        for result in results:
            if isinstance(result, BaseException):
                raise result
        still_open = [port for port, is_open in zip(checked, results) if is_open]
        if still_open:
            logger.debug("Ports still accepting connections on %s: %s", host, still_open)
        return not still_open

    joined = ", ".join(str(port) for port in checked)
    return DescribedProbe(f"ports {joined} closed on {host}", check)
