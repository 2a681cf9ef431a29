"""
Process Controller

Platform-uniform process-tree termination and port-to-pid resolution. The
platform strategy is chosen once per interpreter from ``os.name``; every call
after that goes straight to the operating system and nothing is cached.

Usage:
    from proclifecycle.process_controller import TerminationMode, get_process_by_port, terminate

    pid = get_process_by_port(31234)
    terminate(pid, TerminationMode.FORCED)
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from .process_controller_helpers import (
    PortBinding,
    PortLookupStatus,
    ProcessController,
    TerminationMode,
    UnixProcessController,
    WindowsProcessController,
)

logger = logging.getLogger(__name__)

# Lazy so the platform check and settings load happen on first use
_controller: ProcessController | None = None


def select_process_controller(os_name: Optional[str] = None) -> ProcessController:
    """Build the controller strategy for ``os_name`` (defaults to the running platform)."""
    name = os_name if os_name is not None else os.name
    if name == "nt":
        return WindowsProcessController()
    return UnixProcessController()


def get_process_controller() -> ProcessController:
    """Get or initialize the process-wide controller."""
    global _controller
    if _controller is None:
        _controller = select_process_controller()
        logger.debug("Using %s process controller", _controller.platform_name)
    return _controller


def reset_process_controller() -> None:
    """Forget the selected controller; the next call re-detects the platform."""
    global _controller
    _controller = None


def terminate(pid: int, mode: TerminationMode = TerminationMode.GRACEFUL) -> None:
    """
    Request termination of the process tree rooted at ``pid``.

    Success means the request was issued. Use the convergence poller against
    an observable side effect (port closed, process exited) to confirm.

    Args:
        pid: Positive process identifier
        mode: GRACEFUL (TERM / taskkill) or FORCED (KILL / taskkill /F)

    Raises:
        InvalidTargetError: pid is not a positive integer
        NoSuchProcessError: No such process
        AccessDeniedError: Not permitted to terminate the process or a descendant
        InvocationError: The platform command could not run or reported failure
    """
    get_process_controller().terminate(pid, mode)


def kill_process(pid: int, force: bool = False) -> None:
    """Boolean-flag form of :func:`terminate`."""
    terminate(pid, TerminationMode.from_force(force))


def lookup_port(port: int) -> PortBinding:
    """Resolve the listener on ``port`` as found / not-found / query-failed."""
    return get_process_controller().lookup_port(port)


def get_process_by_port(port: int) -> int:
    """
    Return the pid listening on ``port``.

    Raises:
        InvalidTargetError: port is outside 1-65535
        NoListenerError: Nothing listens on the port
        PortQueryError: The listener table could not be read
    """
    return get_process_controller().get_process_by_port(port)


__all__ = [
    "PortBinding",
    "PortLookupStatus",
    "ProcessController",
    "TerminationMode",
    "get_process_by_port",
    "get_process_controller",
    "kill_process",
    "lookup_port",
    "reset_process_controller",
    "select_process_controller",
    "terminate",
]
