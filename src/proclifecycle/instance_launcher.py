"""Spawn service instances detached from the caller's process group."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Mapping, Optional, Sequence

from .exceptions import AccessDeniedError, InvocationError

logger = logging.getLogger(__name__)


@dataclass
class SpawnedInstance:
    """A started instance; liveness is never tracked here, ask the OS."""

    pid: int
    command: list[str]
    process: subprocess.Popen = field(repr=False)
    log_path: Optional[Path] = None

    def reap(self, timeout: Optional[float] = None) -> Optional[int]:
        """Collect the exit status if the instance has exited, else return None."""
        try:
            return self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return None


def _platform_spawn_kwargs() -> dict:
    if os.name == "nt":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    # New session: the instance leads its own process group, so tree kills reach every child
    return {"start_new_session": True}


def spawn_instance(
    command: Sequence[str],
    *,
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    log_path: Optional[Path] = None,
) -> SpawnedInstance:
    """
    Start ``command`` as a new service instance.

    Args:
        command: Executable and arguments
        cwd: Working directory, defaults to the caller's
        env: Extra environment variables merged over the caller's environment
        log_path: File receiving stdout and stderr; output is discarded when None

    Raises:
        InvocationError: The command could not be started
    """
    args = list(command)
    if not args:
        raise InvocationError("Cannot spawn an empty command")

    spawn_env = os.environ.copy()
    if env:
        spawn_env.update(env)

    log_file: IO[bytes] | int = subprocess.DEVNULL
    try:
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            log_file = log_path.open("ab")
        process = subprocess.Popen(
            args,
            cwd=cwd,
            env=spawn_env,
            stdin=subprocess.DEVNULL,
            stdout=log_file,
            stderr=subprocess.STDOUT,
            **_platform_spawn_kwargs(),
        )
    except PermissionError as exc:
        raise AccessDeniedError(f"Not permitted to run {args[0]}", command=args) from exc
    except OSError as exc:
        raise InvocationError(f"Failed to start {args[0]}: {exc}", command=args) from exc
    finally:
        # The child holds its own handle
        if not isinstance(log_file, int):
            log_file.close()

    logger.info("Spawned instance pid=%s: %s", process.pid, " ".join(args))
    return SpawnedInstance(pid=process.pid, command=args, process=process, log_path=log_path)


__all__ = ["SpawnedInstance", "spawn_instance"]
