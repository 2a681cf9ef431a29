"""Environment-backed configuration helpers and settings."""

from .errors import ConfigurationError
from .runtime import env_bool, env_float, env_seconds, env_str
from .settings import ENV_PREFIX, LifecycleSettings, load_settings, reset_settings

__all__ = [
    "ConfigurationError",
    "ENV_PREFIX",
    "LifecycleSettings",
    "env_bool",
    "env_float",
    "env_seconds",
    "env_str",
    "load_settings",
    "reset_settings",
]
