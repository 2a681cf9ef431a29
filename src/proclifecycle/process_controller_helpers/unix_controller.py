"""Signal-based process control for Linux, macOS and other POSIX systems."""

from __future__ import annotations

import logging
import os
import signal
from typing import List, Optional

import psutil

from ..exceptions import AccessDeniedError, InvocationError, NoSuchProcessError
from .base import ProcessController, parse_pid_lines
from .command_runner import command_output, run_command
from .types import PortBinding, TerminationMode

logger = logging.getLogger(__name__)

# lsof exits 1 when no file matches the selection
_LSOF_NO_MATCH = 1


class UnixProcessController(ProcessController):
    """Terminates with TERM/KILL signals and falls back to lsof for port lookups."""

    platform_name = "unix"

    def _terminate(self, pid: int, mode: TerminationMode) -> None:
        sig = signal.SIGKILL if mode.is_forced else signal.SIGTERM

        # Snapshot before signalling: once the root exits its children are reparented
        descendants = self._snapshot_descendants(pid)
        signalled_group = self._signal_root(pid, sig)
        self._signal_descendants(pid, descendants, sig, skip_pgid=pid if signalled_group else None)

    @staticmethod
    def _snapshot_descendants(pid: int) -> List[psutil.Process]:
        try:
            return psutil.Process(pid).children(recursive=True)
        except psutil.NoSuchProcess as exc:
            raise NoSuchProcessError(pid=pid) from exc
        except psutil.AccessDenied:
            logger.debug("Cannot enumerate descendants of %s; signalling its process group only", pid)
            return []

    @staticmethod
    def _leads_own_group(pid: int) -> bool:
        try:
            pgid = os.getpgid(pid)
        except ProcessLookupError as exc:
            raise NoSuchProcessError(pid=pid) from exc
        except OSError:
            return False
        # killpg(1) means kill(-1): every process the caller may signal
        return pgid == pid and pgid > 1 and pgid != os.getpgrp()

    def _signal_root(self, pid: int, sig: signal.Signals) -> bool:
        """Signal ``pid`` (or the group it leads); True when the whole group was signalled."""
        use_group = self._leads_own_group(pid)
        try:
            if use_group:
                os.killpg(pid, sig)
            else:
                os.kill(pid, sig)
        except ProcessLookupError as exc:
            raise NoSuchProcessError(pid=pid) from exc
        except PermissionError as exc:
            raise AccessDeniedError(f"Not permitted to send {sig.name} to process {pid}", pid=pid) from exc
        logger.debug("Sent %s to %s %s", sig.name, "process group" if use_group else "process", pid)
        return use_group

    @staticmethod
    def _signal_descendants(
        pid: int,
        descendants: List[psutil.Process],
        sig: signal.Signals,
        *,
        skip_pgid: Optional[int],
    ) -> None:
        denied: List[int] = []
        for child in descendants:
            try:
                if skip_pgid is not None and os.getpgid(child.pid) == skip_pgid:
                    continue
                child.send_signal(sig)
            except (ProcessLookupError, psutil.NoSuchProcess):
                logger.debug("Descendant %s of %s exited before it was signalled", child.pid, pid)
            except (psutil.AccessDenied, PermissionError):
                denied.append(child.pid)

        if denied:
            raise AccessDeniedError(
                f"Signalled process {pid} but not permitted to signal descendants {denied}",
                pid=pid,
                denied_pids=denied,
            )

    def _fallback_lookup(self, port: int) -> PortBinding:
        try:
            completed = run_command(
                ["lsof", "-nP", f"-iTCP:{port}", "-sTCP:LISTEN", "-t"],
                timeout=self.command_timeout,
            )
        except InvocationError as exc:
            return PortBinding.query_failed(port, str(exc))

        pids = parse_pid_lines(completed.stdout or "")
        if pids:
            return PortBinding.found(port, pids[0])
        if completed.returncode == 0:
            return PortBinding.not_found(port)
        if completed.returncode == _LSOF_NO_MATCH and not (completed.stderr or "").strip():
            return PortBinding.not_found(port)
        return PortBinding.query_failed(
            port,
            command_output(completed) or f"lsof exited with status {completed.returncode}",
        )


__all__ = ["UnixProcessController"]
