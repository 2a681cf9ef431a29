"""Argument validation performed before any platform dispatch."""

from __future__ import annotations

from ..exceptions import InvalidTargetError

MIN_PORT = 1
MAX_PORT = 65535


def validate_pid(pid: object) -> int:
    """Return ``pid`` if it is a positive integer, otherwise raise."""
    if isinstance(pid, bool) or not isinstance(pid, int):
        raise InvalidTargetError(f"Process identifier must be an integer (got {pid!r})", pid=pid)
    if pid <= 0:
        raise InvalidTargetError(f"Process identifier must be positive (got {pid})", pid=pid)
    return pid


def validate_port(port: object) -> int:
    """Return ``port`` if it is a valid TCP port number, otherwise raise."""
    if isinstance(port, bool) or not isinstance(port, int):
        raise InvalidTargetError(f"Port must be an integer (got {port!r})", port=port)
    if not MIN_PORT <= port <= MAX_PORT:
        raise InvalidTargetError(f"Port must be between {MIN_PORT} and {MAX_PORT} (got {port})", port=port)
    return port
