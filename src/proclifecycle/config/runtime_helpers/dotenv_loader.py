"""Read ``.env`` files that supply fallback values for lifecycle settings."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from ..errors import ConfigurationError

_EXPORT_PREFIX = "export "
_QUOTES = ("'", '"')


def parse_dotenv_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Parse one ``KEY=value`` line.

    Supports an ``export`` prefix, matching single or double quotes around
    the value, and trailing `` # comments`` on unquoted values.

    Returns:
        ``(key, value)``, or None for blank lines, comments and lines without ``=``
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None

    key, raw_value = stripped.split("=", 1)
    key = key.strip()
    if key.startswith(_EXPORT_PREFIX):
        key = key[len(_EXPORT_PREFIX) :].strip()
    if not key:
        return None

    value = raw_value.strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return key, value[1:-1]
    if " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return key, value


class DotenvLoader:
    """Loads fallback values from one or more .env files; earlier files win per key."""

    def __init__(self, paths: Iterable[Path]) -> None:
        self.paths = tuple(paths)

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        """
        Load key-value pairs from a single .env file.

        Returns:
            Parsed values, empty when the file does not exist

        Raises:
            ConfigurationError: The file exists but cannot be read
        """
        if not path.is_file():
            return {}
        try:
            text = path.read_text()
        except OSError as exc:
            raise ConfigurationError.load_failed(path) from exc

        values: Dict[str, str] = {}
        for line in text.splitlines():
            parsed = parse_dotenv_line(line)
            if parsed is not None:
                values[parsed[0]] = parsed[1]
        return values

    def load(self) -> Dict[str, str]:
        merged: Dict[str, str] = {}
        for path in self.paths:
            for key, value in self.load_from_file(path).items():
                merged.setdefault(key, value)
        return merged


__all__ = ["DotenvLoader", "parse_dotenv_line"]
