"""Health-check capabilities mapping an instance address to healthy / not healthy."""

import asyncio
import logging
from typing import Optional

import aiohttp
from aiohttp import ClientError, ClientTimeout

from ..config import load_settings
from .address import parse_address
from .network import port_accepts_connections

logger = logging.getLogger(__name__)

# Constants
_HTTP_OK = 200


async def tcp_health_check(address: str, *, timeout: Optional[float] = None) -> bool:
    """Healthy when a TCP connection to ``address`` is accepted."""
    host, port = parse_address(address)
    return await port_accepts_connections(host, port, timeout=timeout)


class HttpHealthChecker:
    """Checks instance health via an HTTP endpoint."""

    def __init__(self, path: str = "/health", *, timeout_seconds: Optional[float] = None, scheme: str = "http"):
        """
        Initialize HTTP health checker.

        Args:
            path: Endpoint path requested on every instance
            timeout_seconds: Total timeout per request; defaults to the connect timeout setting
            scheme: ``http`` or ``https``
        """
        self.path = path if path.startswith("/") else f"/{path}"
        self.timeout_seconds = timeout_seconds
        self.scheme = scheme

    def url_for(self, address: str) -> str:
        return f"{self.scheme}://{parse_address(address)}{self.path}"

    async def __call__(self, address: str) -> bool:
        """
        Check instance health.

        Returns:
            True when the endpoint answers 200, False on any other status,
            timeout or connection failure
        """
        url = self.url_for(address)
        timeout_seconds = self.timeout_seconds or load_settings().connect_timeout_seconds
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url, timeout=ClientTimeout(total=timeout_seconds)) as response:
                    if response.status == _HTTP_OK:
                        return True
                    logger.debug("Health endpoint %s answered HTTP %s", url, response.status)
                    return False
        except asyncio.TimeoutError:
            logger.debug("Health endpoint %s timed out after %ss", url, timeout_seconds)
            return False
        except (ClientError, OSError) as exc:
            logger.debug("Health endpoint %s unreachable: %s", url, exc)
            return False
