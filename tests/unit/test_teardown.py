"""Tests for teardown helpers."""

from __future__ import annotations

import os
import socket
import subprocess
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from proclifecycle.exceptions import ConvergenceTimeoutError, NoSuchProcessError, PortQueryError
from proclifecycle.process_controller import PortBinding, TerminationMode
from proclifecycle.teardown import (
    release_port,
    terminate_with_escalation,
    wait_for_address_healthy,
    wait_for_address_removed,
    wait_for_address_unhealthy,
    wait_for_ports_closed,
    wait_for_process_exit,
)

_FAST = {"timeout": 0.1, "interval": 0.02}


def _found_then_gone(port: int, pid: int):
    """Lookup side effect: the listener is present once, then gone."""
    calls = iter([PortBinding.found(port, pid)])
    return lambda _port: next(calls, PortBinding.not_found(port))


class TestWaitForAddress:
    @pytest.mark.asyncio
    async def test_healthy(self) -> None:
        await wait_for_address_healthy("127.0.0.1:8080", MagicMock(return_value=True), **_FAST)

    @pytest.mark.asyncio
    async def test_healthy_timeout_names_probe_and_target(self) -> None:
        with pytest.raises(ConvergenceTimeoutError) as exc_info:
            await wait_for_address_healthy("127.0.0.1:8080", AsyncMock(return_value=False), **_FAST)

        error = exc_info.value
        assert error.probe == "127.0.0.1:8080 healthy"
        assert error.target == "127.0.0.1:8080"
        assert error.timeout == 0.1

    @pytest.mark.asyncio
    async def test_unhealthy(self) -> None:
        await wait_for_address_unhealthy("a:1", MagicMock(side_effect=[True, False]), **_FAST)

    @pytest.mark.asyncio
    async def test_removed(self) -> None:
        listings = iter([["a:1", "b:2"], ["b:2"]])
        await wait_for_address_removed("a:1", lambda: next(listings), **_FAST)

    @pytest.mark.asyncio
    async def test_removed_timeout(self) -> None:
        with pytest.raises(ConvergenceTimeoutError, match="a:1 removed from registry"):
            await wait_for_address_removed("a:1", MagicMock(return_value=["a:1"]), **_FAST)


class TestWaitForPortsClosed:
    @pytest.mark.asyncio
    async def test_closed(self, free_port: int) -> None:
        await wait_for_ports_closed(free_port, **_FAST)

    @pytest.mark.asyncio
    async def test_open_port_times_out(self, listening_port: int, free_port: int) -> None:
        with pytest.raises(ConvergenceTimeoutError) as exc_info:
            await wait_for_ports_closed(free_port, listening_port, **_FAST)
        assert exc_info.value.target == [free_port, listening_port]

    @pytest.mark.asyncio
    async def test_uses_configured_defaults(self, monkeypatch: pytest.MonkeyPatch, listening_port: int) -> None:
        monkeypatch.setenv("PROCLIFECYCLE_CONVERGENCE_TIMEOUT_SECONDS", "0.1")
        monkeypatch.setenv("PROCLIFECYCLE_POLL_INTERVAL_SECONDS", "0.05")
        with pytest.raises(ConvergenceTimeoutError) as exc_info:
            await wait_for_ports_closed(listening_port)
        assert exc_info.value.timeout == 0.1


class TestWaitForProcessExit:
    @pytest.mark.asyncio
    async def test_exited(self) -> None:
        child = subprocess.Popen([sys.executable, "-c", "pass"])
        child.wait()
        await wait_for_process_exit(child.pid, **_FAST)


class TestReleasePort:
    @pytest.mark.asyncio
    async def test_nothing_listening(self) -> None:
        with patch("proclifecycle.teardown.lookup_port", return_value=PortBinding.not_found(8080)), patch(
            "proclifecycle.teardown.terminate"
        ) as mock_terminate:
            assert await release_port(8080) is None
        mock_terminate.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_failure(self) -> None:
        with patch("proclifecycle.teardown.lookup_port", return_value=PortBinding.query_failed(8080, "denied")):
            with pytest.raises(PortQueryError, match="denied"):
                await release_port(8080)

    @pytest.mark.asyncio
    async def test_terminates_listener_and_waits(self, free_port: int) -> None:
        with patch("proclifecycle.teardown.lookup_port", side_effect=_found_then_gone(free_port, 4242)), patch(
            "proclifecycle.teardown.terminate"
        ) as mock_terminate:
            assert await release_port(free_port, **_FAST) == 4242
        mock_terminate.assert_called_once_with(4242, TerminationMode.FORCED)

    @pytest.mark.asyncio
    async def test_listener_already_gone(self, free_port: int) -> None:
        with patch("proclifecycle.teardown.lookup_port", side_effect=_found_then_gone(free_port, 4242)), patch(
            "proclifecycle.teardown.terminate", side_effect=NoSuchProcessError(pid=4242)
        ):
            assert await release_port(free_port, mode=TerminationMode.GRACEFUL, **_FAST) == 4242

    @pytest.mark.asyncio
    async def test_port_stays_open(self, listening_port: int) -> None:
        with patch(
            "proclifecycle.teardown.lookup_port", return_value=PortBinding.found(listening_port, 4242)
        ), patch("proclifecycle.teardown.terminate"):
            with pytest.raises(ConvergenceTimeoutError) as exc_info:
                await release_port(listening_port, **_FAST)
        assert exc_info.value.target == listening_port

    @pytest.mark.asyncio
    async def test_listener_on_other_interface_keeps_port_held(self, free_port: int) -> None:
        # Loopback dial is refused but the table still lists a listener
        with patch(
            "proclifecycle.teardown.lookup_port", return_value=PortBinding.found(free_port, 4242)
        ), patch("proclifecycle.teardown.terminate"):
            with pytest.raises(ConvergenceTimeoutError, match=f"port {free_port} released"):
                await release_port(free_port, **_FAST)

    @pytest.mark.asyncio
    async def test_ipv6_only_listener_is_not_reported_released(self) -> None:
        if not socket.has_ipv6:
            pytest.skip("IPv6 unavailable")
        sock = socket.socket(socket.AF_INET6, socket.SOCK_STREAM)
        try:
            sock.bind(("::1", 0))
        except OSError:
            sock.close()
            pytest.skip("cannot bind ::1")
        sock.listen(4)
        port = sock.getsockname()[1]
        try:
            with patch("proclifecycle.teardown.terminate") as mock_terminate:
                with pytest.raises(ConvergenceTimeoutError):
                    await release_port(port, **_FAST)
            mock_terminate.assert_called_once_with(os.getpid(), TerminationMode.FORCED)
        finally:
            sock.close()


class TestTerminateWithEscalation:
    @pytest.mark.asyncio
    async def test_graceful_exit(self) -> None:
        with patch("proclifecycle.teardown.terminate") as mock_terminate, patch(
            "proclifecycle.teardown.wait_until", AsyncMock(return_value=True)
        ):
            mode = await terminate_with_escalation(4242, graceful_timeout=0.1, interval=0.02)

        assert mode is TerminationMode.GRACEFUL
        mock_terminate.assert_called_once_with(4242, TerminationMode.GRACEFUL)

    @pytest.mark.asyncio
    async def test_escalates_to_forced(self) -> None:
        with patch("proclifecycle.teardown.terminate") as mock_terminate, patch(
            "proclifecycle.teardown.wait_until", AsyncMock(side_effect=[False, True])
        ):
            mode = await terminate_with_escalation(4242, graceful_timeout=0.1, interval=0.02)

        assert mode is TerminationMode.FORCED
        assert mock_terminate.call_args_list[1].args == (4242, TerminationMode.FORCED)

    @pytest.mark.asyncio
    async def test_exit_during_escalation(self) -> None:
        with patch(
            "proclifecycle.teardown.terminate", side_effect=[None, NoSuchProcessError(pid=4242)]
        ), patch("proclifecycle.teardown.wait_until", AsyncMock(return_value=False)):
            mode = await terminate_with_escalation(4242, graceful_timeout=0.1, interval=0.02)

        assert mode is TerminationMode.GRACEFUL

    @pytest.mark.asyncio
    async def test_survives_forced(self) -> None:
        with patch("proclifecycle.teardown.terminate"), patch(
            "proclifecycle.teardown.wait_until", AsyncMock(return_value=False)
        ):
            with pytest.raises(ConvergenceTimeoutError, match="process 4242 exited"):
                await terminate_with_escalation(4242, graceful_timeout=0.1, interval=0.02)

    @pytest.mark.asyncio
    async def test_missing_process(self) -> None:
        with patch("proclifecycle.teardown.terminate", side_effect=NoSuchProcessError(pid=4242)):
            with pytest.raises(NoSuchProcessError):
                await terminate_with_escalation(4242)
