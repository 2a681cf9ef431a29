"""taskkill-based process control for Windows."""

from __future__ import annotations

import logging

from ..exceptions import AccessDeniedError, CommandFailedError, InvocationError, NoSuchProcessError
from .base import ProcessController, parse_pid_lines
from .command_runner import command_output, run_command
from .types import PortBinding, TerminationMode

logger = logging.getLogger(__name__)

# taskkill exit status when the pid does not exist
_TASKKILL_NOT_FOUND = 128


class WindowsProcessController(ProcessController):
    """Terminates with ``taskkill /T`` and falls back to Get-NetTCPConnection for port lookups."""

    platform_name = "windows"

    def _terminate(self, pid: int, mode: TerminationMode) -> None:
        args = ["taskkill", "/PID", str(pid)]
        if mode.is_forced:
            args.append("/F")
        # Tree kill regardless of mode
        args.append("/T")

        completed = run_command(args, timeout=self.command_timeout)
        if completed.returncode == 0:
            return

        output = command_output(completed)
        lowered = output.lower()
        if completed.returncode == _TASKKILL_NOT_FOUND or "not found" in lowered:
            raise NoSuchProcessError(pid=pid)
        if "access is denied" in lowered:
            raise AccessDeniedError(f"Not permitted to terminate process {pid}: {output}", pid=pid)
        raise CommandFailedError(returncode=completed.returncode, output=output, pid=pid)

    def _fallback_lookup(self, port: int) -> PortBinding:
        script = f"(Get-NetTCPConnection -LocalPort {port} -State Listen -ErrorAction SilentlyContinue).OwningProcess"
        try:
            completed = run_command(
                ["powershell", "-NoProfile", "-NonInteractive", "-Command", script],
                timeout=self.command_timeout,
            )
        except InvocationError as exc:
            return PortBinding.query_failed(port, str(exc))

        if completed.returncode != 0:
            return PortBinding.query_failed(
                port,
                command_output(completed) or f"powershell exited with status {completed.returncode}",
            )

        pids = parse_pid_lines(completed.stdout or "")
        if pids:
            return PortBinding.found(port, pids[0])
        return PortBinding.not_found(port)


__all__ = ["WindowsProcessController"]
