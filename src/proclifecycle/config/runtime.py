"""Typed accessors for environment-backed configuration.

Values come from the process environment first, then from ``.env`` files in
the working directory and the home directory. The ``.env`` files are read
once and cached until :func:`reset_default_values` is called.
"""

from __future__ import annotations

import os
from pathlib import Path

from .errors import ConfigurationError

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}

_DOTENV_CANDIDATES = (Path(".env"), Path.home() / ".env")

_DEFAULT_VALUES: dict[str, str] | None = None


def _load_default_values() -> dict[str, str]:
    from .runtime_helpers import DotenvLoader

    global _DEFAULT_VALUES
    if _DEFAULT_VALUES is None:
        _DEFAULT_VALUES = DotenvLoader(_DOTENV_CANDIDATES).load()
    return _DEFAULT_VALUES


def reset_default_values() -> None:
    """Forget cached .env defaults so the next lookup re-reads the files."""
    global _DEFAULT_VALUES
    _DEFAULT_VALUES = None


def _lookup(name: str, *, strip: bool, allow_blank: bool) -> str | None:
    for value in (os.getenv(name), _load_default_values().get(name)):
        if value is None:
            continue
        if strip:
            value = value.strip()
        if value or allow_blank:
            return value
    return None


def env_str(
    name: str,
    or_value: str | None = None,
    *,
    required: bool = False,
    strip: bool = True,
    allow_blank: bool = False,
) -> str | None:
    """Fetch an environment variable as a string."""
    value = _lookup(name, strip=strip, allow_blank=allow_blank)
    if value is not None:
        return value
    if required:
        raise ConfigurationError.missing_variable(name)
    return or_value


def env_float(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    """Fetch an environment variable and coerce it to ``float``."""
    raw = env_str(name, required=required and or_value is None)
    if raw is None:
        return or_value
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError.malformed_variable(name, raw, "a float") from exc


def env_bool(name: str, or_value: bool | None = None, *, required: bool = False) -> bool | None:
    """Fetch an environment variable and coerce it to ``bool``."""
    raw = env_str(name, required=required and or_value is None)
    if raw is None:
        return or_value

    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError.malformed_variable(name, raw, f"one of {sorted(_TRUE_VALUES | _FALSE_VALUES)}")


def env_seconds(name: str, or_value: float | None = None, *, required: bool = False) -> float | None:
    """Fetch a strictly positive duration in (possibly fractional) seconds."""
    value = env_float(name, or_value=or_value, required=required)
    if value is None:
        return None
    if value <= 0:
        raise ConfigurationError.invalid_value(name, value, "Must be positive")
    return value


__all__ = [
    "ConfigurationError",
    "env_bool",
    "env_float",
    "env_seconds",
    "env_str",
    "reset_default_values",
]
