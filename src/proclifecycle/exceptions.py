"""Exception hierarchy for process and port lifecycle control.

All errors raised by this package inherit from ``ProcessLifecycleError`` and
support two patterns:
1. No-argument raise: raise NoListenerError()
2. Contextual attributes: err = NoListenerError(port=8080); raise err

Failures fall into three families:
- invocation failures: the platform call could not be made or was refused
- target-not-found: no process with the pid, no listener on the port
- convergence timeouts: a probe never held within its deadline
"""

from typing import Any


class ProcessLifecycleError(Exception):
    """Base exception for all process lifecycle errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Process lifecycle error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class InvalidTargetError(ProcessLifecycleError, ValueError):
    """Process identifier or port number is out of range."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Process identifier or port number is out of range"
        super().__init__(message, **kwargs)


class InvocationError(ProcessLifecycleError):
    """Platform command could not be launched or was refused."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Platform command could not be launched or was refused"
        super().__init__(message, **kwargs)


class AccessDeniedError(InvocationError):
    """Operation not permitted on the target process."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Operation not permitted on the target process"
        super().__init__(message, **kwargs)


class CommandFailedError(InvocationError):
    """Platform command exited with a failure status."""

    def __init__(self, message: str = "", *, returncode: int | None = None, output: str = "", **kwargs: Any) -> None:
        if not message:
            message = f"Platform command exited with status {returncode}"
            if output:
                message = f"{message}: {output}"
        super().__init__(message, returncode=returncode, output=output, **kwargs)


class TargetNotFoundError(ProcessLifecycleError):
    """Target process or listener does not exist."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Target process or listener does not exist"
        super().__init__(message, **kwargs)


class NoSuchProcessError(TargetNotFoundError):
    """No process exists with the given identifier."""

    def __init__(self, message: str = "", *, pid: int | None = None, **kwargs: Any) -> None:
        if not message:
            message = f"No process with pid {pid}" if pid is not None else "No such process"
        super().__init__(message, pid=pid, **kwargs)


class NoListenerError(TargetNotFoundError):
    """No process is listening on the given port."""

    def __init__(self, message: str = "", *, port: int | None = None, **kwargs: Any) -> None:
        if not message:
            message = f"No process listening on port {port}" if port is not None else "No listener on port"
        super().__init__(message, port=port, **kwargs)


class PortQueryError(ProcessLifecycleError):
    """Listener table could not be queried."""

    def __init__(self, message: str = "", *, port: int | None = None, **kwargs: Any) -> None:
        if not message:
            message = f"Failed to query listener on port {port}" if port is not None else "Listener query failed"
        super().__init__(message, port=port, **kwargs)


class ConvergenceTimeoutError(ProcessLifecycleError):
    """Condition did not hold before the deadline."""

    def __init__(
        self,
        message: str = "",
        *,
        probe: str = "",
        target: Any = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> None:
        if not message:
            message = f"Timed out after {timeout}s waiting for {probe} ({target})"
        super().__init__(message, probe=probe, target=target, timeout=timeout, **kwargs)


__all__ = [
    "AccessDeniedError",
    "CommandFailedError",
    "ConvergenceTimeoutError",
    "InvalidTargetError",
    "InvocationError",
    "NoListenerError",
    "NoSuchProcessError",
    "PortQueryError",
    "ProcessLifecycleError",
    "TargetNotFoundError",
]
