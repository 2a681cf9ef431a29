"""Platform strategies and value types behind the process controller facade."""

from .base import ProcessController
from .types import PortBinding, PortLookupStatus, TerminationMode
from .unix_controller import UnixProcessController
from .windows_controller import WindowsProcessController

__all__ = [
    "PortBinding",
    "PortLookupStatus",
    "ProcessController",
    "TerminationMode",
    "UnixProcessController",
    "WindowsProcessController",
]
