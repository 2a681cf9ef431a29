"""Platform-neutral process controller contract and shared listener lookup."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import psutil

from ..config import load_settings
from ..exceptions import NoListenerError, PortQueryError
from .types import PortBinding, PortLookupStatus, TerminationMode
from .validation import validate_pid, validate_port

logger = logging.getLogger(__name__)


class ProcessController(ABC):
    """
    Terminates process trees and resolves which process listens on a port.

    Stateless: every call goes back to the operating system. Subclasses supply
    the platform termination call and a command-line fallback for when the
    TCP table cannot be read directly.
    """

    platform_name: str = ""

    def __init__(self, *, command_timeout: Optional[float] = None) -> None:
        if command_timeout is None:
            command_timeout = load_settings().command_timeout_seconds
        self.command_timeout = command_timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def terminate(self, pid: int, mode: TerminationMode = TerminationMode.GRACEFUL) -> None:
        """
        Request termination of ``pid`` and every process it spawned.

        Returns once the request has been issued; it does not wait for the
        process to exit.

        Raises:
            InvalidTargetError: pid is not a positive integer
            NoSuchProcessError: No process with that pid exists
            AccessDeniedError: The caller may not signal the process
            InvocationError: The platform command could not run or failed
        """
        pid = validate_pid(pid)
        mode = TerminationMode(mode)
        logger.info("Requesting %s termination of process tree %s", mode.value, pid)
        self._terminate(pid, mode)

    def lookup_port(self, port: int) -> PortBinding:
        """Resolve the listener on ``port`` without raising for not-found or query failures."""
        port = validate_port(port)
        binding = self._lookup_from_table(port)
        logger.debug("Port %s lookup: %s (pid=%s)", port, binding.status.value, binding.pid)
        return binding

    def get_process_by_port(self, port: int) -> int:
        """
        Return the pid listening on ``port``.

        Raises:
            InvalidTargetError: port is outside 1-65535
            NoListenerError: Nothing listens on the port
            PortQueryError: The listener table could not be read
        """
        binding = self.lookup_port(port)
        if binding.status is PortLookupStatus.FOUND:
            assert binding.pid is not None
            return binding.pid
        if binding.status is PortLookupStatus.NOT_FOUND:
            raise NoListenerError(port=port)
        raise PortQueryError(f"Failed to query listener on port {port}: {binding.error}", port=port)

    # ------------------------------------------------------------------
    # Platform hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _terminate(self, pid: int, mode: TerminationMode) -> None:
        """Issue the platform termination request for a validated pid."""

    @abstractmethod
    def _fallback_lookup(self, port: int) -> PortBinding:
        """Resolve the listener with a platform command when the TCP table is unreadable."""

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _lookup_from_table(self, port: int) -> PortBinding:
        try:
            connections = psutil.net_connections(kind="tcp")
        except psutil.AccessDenied:
            logger.debug("TCP table not readable; falling back to %s query for port %s", self.platform_name, port)
            return self._fallback_lookup(port)
        except (psutil.Error, OSError) as exc:
            logger.debug("TCP table query failed (%s); falling back for port %s", exc, port)
            return self._fallback_lookup(port)

        listeners = [
            conn for conn in connections if conn.status == psutil.CONN_LISTEN and conn.laddr and conn.laddr.port == port
        ]
        if not listeners:
            return PortBinding.not_found(port)

        for conn in listeners:
            if conn.pid:
                return PortBinding.found(port, conn.pid)

        # Socket owned by a process this user cannot inspect
        return PortBinding.query_failed(port, f"Port {port} has a listener whose owning process is not visible")


def parse_pid_lines(output: str) -> List[int]:
    """Parse one pid per line, ignoring blanks and non-numeric noise, preserving order."""
    pids: List[int] = []
    for line in output.splitlines():
        token = line.strip()
        if not token.isdigit():
            continue
        pid = int(token)
        if pid > 0 and pid not in pids:
            pids.append(pid)
    return pids


__all__ = ["ProcessController", "parse_pid_lines"]
