"""Run platform commands and translate launch failures into lifecycle errors."""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from ..exceptions import AccessDeniedError, InvocationError

logger = logging.getLogger(__name__)


def run_command(args: Sequence[str], *, timeout: float) -> subprocess.CompletedProcess:
    """
    Run ``args`` to completion and capture its text output.

    A non-zero exit status is returned to the caller for interpretation; only
    failures to launch or finish the command raise.

    Raises:
        AccessDeniedError: The executable could not be started for lack of permission
        InvocationError: The executable is missing or did not finish within ``timeout``
    """
    command = list(args)
    logger.debug("Running %s", " ".join(command))
    try:
        completed = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise InvocationError(f"Command not found: {command[0]}", command=command) from exc
    except PermissionError as exc:
        raise AccessDeniedError(f"Not permitted to run {command[0]}", command=command) from exc
    except subprocess.TimeoutExpired as exc:
        raise InvocationError(f"{command[0]} did not finish within {timeout}s", command=command) from exc
    except OSError as exc:
        raise InvocationError(f"Failed to launch {command[0]}: {exc}", command=command) from exc

    logger.debug("%s exited with status %s", command[0], completed.returncode)
    return completed


def command_output(completed: subprocess.CompletedProcess) -> str:
    """Combined, stripped stdout and stderr for error messages."""
    parts = [part.strip() for part in (completed.stdout or "", completed.stderr or "") if part and part.strip()]
    return " ".join(parts)
