"""Exception types for lifecycle configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Union


class ConfigurationError(RuntimeError):
    """Raised when a lifecycle setting is missing, malformed or out of range."""

    @classmethod
    def missing_variable(cls, name: str) -> "ConfigurationError":
        return cls(f"Required environment variable {name!r} is not set")

    @classmethod
    def malformed_variable(cls, name: str, raw: str, expected: str) -> "ConfigurationError":
        return cls(f"Environment variable {name!r} must be {expected} (got {raw!r})")

    @classmethod
    def invalid_value(cls, setting: str, value: object, reason: str = "") -> "ConfigurationError":
        """Create error for a setting that parsed but is not usable."""
        msg = f"Invalid value for {setting}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg)

    @classmethod
    def load_failed(cls, path: Union[str, Path]) -> "ConfigurationError":
        return cls(f"Failed to read configuration file {path}")


__all__ = ["ConfigurationError"]
