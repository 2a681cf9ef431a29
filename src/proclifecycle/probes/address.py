"""Parsing of ``host:port`` instance addresses."""

from __future__ import annotations

from typing import NamedTuple
from urllib.parse import urlsplit

from ..exceptions import InvalidTargetError
from ..process_controller_helpers.validation import validate_port


class HostPort(NamedTuple):
    host: str
    port: int

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def parse_address(address: str) -> HostPort:
    """
    Split ``address`` into host and port.

    Accepts ``host:port``, ``[ipv6]:port`` and URLs such as
    ``http://127.0.0.1:8080/health``.

    Raises:
        InvalidTargetError: No port, a non-numeric port, or a port out of range
    """
    text = address.strip()
    if "://" not in text:
        text = f"//{text}"
    try:
        parts = urlsplit(text)
        port = parts.port
    except ValueError as exc:
        raise InvalidTargetError(f"Invalid address {address!r}: {exc}", address=address) from exc

    if not parts.hostname or port is None:
        raise InvalidTargetError(f"Address {address!r} must include a host and a port", address=address)
    return HostPort(parts.hostname, validate_port(port))
