"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import socket
from typing import Iterator

import pytest

from proclifecycle.config import ENV_PREFIX, reset_settings
from proclifecycle.config import runtime
from proclifecycle.process_controller import reset_process_controller


@pytest.fixture(autouse=True)
def isolated_lifecycle_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start each test with no lifecycle variables, no .env defaults and no cached state."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key)
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    reset_settings()
    reset_process_controller()
    yield
    reset_settings()
    reset_process_controller()


@pytest.fixture
def listening_socket() -> Iterator[socket.socket]:
    """A TCP socket listening on an ephemeral loopback port."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(16)
    try:
        yield sock
    finally:
        sock.close()


@pytest.fixture
def listening_port(listening_socket: socket.socket) -> int:
    return listening_socket.getsockname()[1]


@pytest.fixture
def free_port() -> int:
    """A loopback port that nothing listens on (bound once, then released)."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
