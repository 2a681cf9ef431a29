"""Lifecycle timing settings resolved from the environment."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError
from .runtime import env_seconds, env_str, reset_default_values

ENV_PREFIX = "PROCLIFECYCLE_"

DEFAULT_POLL_INTERVAL_SECONDS = 0.25
DEFAULT_CONVERGENCE_TIMEOUT_SECONDS = 10.0
DEFAULT_GRACEFUL_TIMEOUT_SECONDS = 5.0
DEFAULT_COMMAND_TIMEOUT_SECONDS = 15.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 0.5


@dataclass(frozen=True)
class LifecycleSettings:
    """Call-site defaults for termination and convergence checks."""

    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    convergence_timeout_seconds: float = DEFAULT_CONVERGENCE_TIMEOUT_SECONDS
    graceful_timeout_seconds: float = DEFAULT_GRACEFUL_TIMEOUT_SECONDS
    command_timeout_seconds: float = DEFAULT_COMMAND_TIMEOUT_SECONDS
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    log_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        for field_name in (
            "poll_interval_seconds",
            "convergence_timeout_seconds",
            "graceful_timeout_seconds",
            "command_timeout_seconds",
            "connect_timeout_seconds",
        ):
            value = getattr(self, field_name)
            if value <= 0:
                raise ConfigurationError.invalid_value(field_name, value, "Must be positive")
        if self.poll_interval_seconds > self.convergence_timeout_seconds:
            raise ConfigurationError.invalid_value(
                "poll_interval_seconds",
                self.poll_interval_seconds,
                "Must not exceed convergence_timeout_seconds",
            )

    @classmethod
    def from_env(cls) -> "LifecycleSettings":
        raw_log_dir = env_str(f"{ENV_PREFIX}LOG_DIR")
        return cls(
            poll_interval_seconds=_seconds("POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS),
            convergence_timeout_seconds=_seconds("CONVERGENCE_TIMEOUT_SECONDS", DEFAULT_CONVERGENCE_TIMEOUT_SECONDS),
            graceful_timeout_seconds=_seconds("GRACEFUL_TIMEOUT_SECONDS", DEFAULT_GRACEFUL_TIMEOUT_SECONDS),
            command_timeout_seconds=_seconds("COMMAND_TIMEOUT_SECONDS", DEFAULT_COMMAND_TIMEOUT_SECONDS),
            connect_timeout_seconds=_seconds("CONNECT_TIMEOUT_SECONDS", DEFAULT_CONNECT_TIMEOUT_SECONDS),
            log_dir=Path(raw_log_dir).expanduser() if raw_log_dir else None,
        )


def _seconds(suffix: str, default: float) -> float:
    value = env_seconds(f"{ENV_PREFIX}{suffix}", or_value=default)
    assert value is not None
    return value


# Lazy load so importing the package never requires a valid environment
_settings: LifecycleSettings | None = None


def load_settings() -> LifecycleSettings:
    """Get or initialize the process-wide settings."""
    global _settings
    if _settings is None:
        _settings = LifecycleSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop cached settings and .env defaults."""
    global _settings
    _settings = None
    reset_default_values()


__all__ = ["ENV_PREFIX", "LifecycleSettings", "load_settings", "reset_settings"]
