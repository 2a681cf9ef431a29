"""
Process and port lifecycle control for end-to-end verification.

This package provides two loosely coupled components:
- Process controller: terminate process trees and resolve which pid listens on a port,
  with one strategy for Unix-family systems and one for Windows
- Convergence poller: wait until a probe holds or a timeout elapses, with probes for
  port closure, health, registry removal and process exit
"""

from .convergence_poller import ConvergenceProbe, wait_until, wait_until_sync
from .exceptions import (
    AccessDeniedError,
    CommandFailedError,
    ConvergenceTimeoutError,
    InvalidTargetError,
    InvocationError,
    NoListenerError,
    NoSuchProcessError,
    PortQueryError,
    ProcessLifecycleError,
    TargetNotFoundError,
)
from .process_controller import (
    PortBinding,
    PortLookupStatus,
    TerminationMode,
    get_process_by_port,
    kill_process,
    lookup_port,
    terminate,
)

__all__ = [
    "AccessDeniedError",
    "CommandFailedError",
    "ConvergenceProbe",
    "ConvergenceTimeoutError",
    "InvalidTargetError",
    "InvocationError",
    "NoListenerError",
    "NoSuchProcessError",
    "PortBinding",
    "PortLookupStatus",
    "PortQueryError",
    "ProcessLifecycleError",
    "TargetNotFoundError",
    "TerminationMode",
    "get_process_by_port",
    "kill_process",
    "lookup_port",
    "terminate",
    "wait_until",
    "wait_until_sync",
]
