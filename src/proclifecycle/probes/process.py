"""Process liveness probe."""

from __future__ import annotations

import logging

import psutil

from ..process_controller_helpers.validation import validate_pid
from .types import DescribedProbe

logger = logging.getLogger(__name__)


def process_exited(pid: int) -> DescribedProbe:
    """Probe that holds once ``pid`` no longer exists or is a zombie awaiting reaping."""
    pid = validate_pid(pid)

    def check() -> bool:
        try:
            return psutil.Process(pid).status() == psutil.STATUS_ZOMBIE
        except psutil.NoSuchProcess:
            return True
        except psutil.AccessDenied:
            # Exists, owned by someone else
            logger.debug("Access denied inspecting process %s; treating as alive", pid)
            return False

    return DescribedProbe(f"process {pid} exited", check)
