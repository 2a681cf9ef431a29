"""Value types shared by the platform process controllers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TerminationMode(str, Enum):
    """How hard to ask a process tree to stop."""

    GRACEFUL = "graceful"
    FORCED = "forced"

    @classmethod
    def from_force(cls, force: bool) -> "TerminationMode":
        return cls.FORCED if force else cls.GRACEFUL

    @property
    def is_forced(self) -> bool:
        return self is TerminationMode.FORCED


class PortLookupStatus(Enum):
    """Outcome of resolving the listener on a port"""

    FOUND = "found"
    NOT_FOUND = "not_found"
    QUERY_FAILED = "query_failed"


@dataclass(frozen=True)
class PortBinding:
    """
    A TCP port and the process listening on it, if any.

    ``pid`` is set only when ``status`` is FOUND; ``error`` only when the
    listener table could not be read.
    """

    port: int
    status: PortLookupStatus
    pid: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def found(cls, port: int, pid: int) -> "PortBinding":
        return cls(port=port, status=PortLookupStatus.FOUND, pid=pid)

    @classmethod
    def not_found(cls, port: int) -> "PortBinding":
        return cls(port=port, status=PortLookupStatus.NOT_FOUND)

    @classmethod
    def query_failed(cls, port: int, error: str) -> "PortBinding":
        return cls(port=port, status=PortLookupStatus.QUERY_FAILED, error=error)

    @property
    def is_found(self) -> bool:
        return self.status is PortLookupStatus.FOUND

    @property
    def is_listening(self) -> bool:
        """False only when the port is known to have no listener."""
        return self.status is not PortLookupStatus.NOT_FOUND
