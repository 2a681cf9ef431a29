"""Command-line entry point for shell-driven test suites.

Usage:
    python -m proclifecycle pid-of 31234
    python -m proclifecycle kill 4242 --force
    python -m proclifecycle release 31234
    python -m proclifecycle wait-closed 31234 31235 --timeout 5
    python -m proclifecycle wait-healthy 127.0.0.1:8080 --http-path /health
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from .exceptions import ConvergenceTimeoutError, InvalidTargetError, ProcessLifecycleError, TargetNotFoundError
from .logging_config import setup_logging
from .probes import DEFAULT_HOST, HttpHealthChecker, tcp_health_check
from .process_controller import PortLookupStatus, TerminationMode, lookup_port, terminate
from .teardown import release_port, wait_for_address_healthy, wait_for_ports_closed

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_FAILURE = 2
EXIT_TIMEOUT = 3
EXIT_USAGE = 64


def _add_wait_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--timeout", type=float, default=None, help="Seconds to wait (default: configured)")
    parser.add_argument("--interval", type=float, default=None, help="Seconds between checks (default: configured)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="proclifecycle",
        description="Terminate processes, resolve port owners and wait for teardown to converge.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    pid_of = sub.add_parser("pid-of", help="Print the pid listening on a TCP port")
    pid_of.add_argument("port", type=int)

    kill = sub.add_parser("kill", help="Terminate a process tree")
    kill.add_argument("pid", type=int)
    kill.add_argument("--force", action="store_true", help="Kill immediately instead of asking to terminate")

    release = sub.add_parser("release", help="Terminate the listener on a port and wait for the port to close")
    release.add_argument("port", type=int)
    release.add_argument("--graceful", action="store_true", help="Ask the listener to terminate instead of killing it")
    _add_wait_options(release)

    wait_closed = sub.add_parser("wait-closed", help="Wait until all ports refuse connections")
    wait_closed.add_argument("ports", type=int, nargs="+")
    wait_closed.add_argument("--host", default=DEFAULT_HOST)
    _add_wait_options(wait_closed)

    wait_healthy = sub.add_parser("wait-healthy", help="Wait until an address answers health checks")
    wait_healthy.add_argument("address")
    wait_healthy.add_argument("--http-path", default=None, help="Probe this HTTP path instead of a TCP dial")
    _add_wait_options(wait_healthy)

    return parser


def _pid_of(args: argparse.Namespace) -> int:
    binding = lookup_port(args.port)
    if binding.status is PortLookupStatus.FOUND:
        print(binding.pid)
        return EXIT_OK
    if binding.status is PortLookupStatus.NOT_FOUND:
        print(f"No process listening on port {args.port}", file=sys.stderr)
        return EXIT_NOT_FOUND
    print(f"Failed to query port {args.port}: {binding.error}", file=sys.stderr)
    return EXIT_FAILURE


def _kill(args: argparse.Namespace) -> int:
    terminate(args.pid, TerminationMode.from_force(args.force))
    return EXIT_OK


def _release(args: argparse.Namespace) -> int:
    mode = TerminationMode.GRACEFUL if args.graceful else TerminationMode.FORCED
    pid = asyncio.run(release_port(args.port, mode=mode, timeout=args.timeout, interval=args.interval))
    if pid is None:
        print(f"Port {args.port} was already free")
    else:
        print(f"Released port {args.port} (pid {pid})")
    return EXIT_OK


def _wait_closed(args: argparse.Namespace) -> int:
    asyncio.run(wait_for_ports_closed(*args.ports, host=args.host, timeout=args.timeout, interval=args.interval))
    return EXIT_OK


def _wait_healthy(args: argparse.Namespace) -> int:
    health_check = HttpHealthChecker(args.http_path) if args.http_path else tcp_health_check
    asyncio.run(wait_for_address_healthy(args.address, health_check, timeout=args.timeout, interval=args.interval))
    return EXIT_OK


_HANDLERS = {
    "pid-of": _pid_of,
    "kill": _kill,
    "release": _release,
    "wait-closed": _wait_closed,
    "wait-healthy": _wait_healthy,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)

    handler = _HANDLERS[args.command]
    try:
        return handler(args)
    except InvalidTargetError as exc:
        print(f"Invalid target: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except TargetNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_NOT_FOUND
    except ConvergenceTimeoutError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_TIMEOUT
    except ProcessLifecycleError as exc:
        print(f"{args.command} failed: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except ValueError as exc:
        print(f"Invalid arguments: {exc}", file=sys.stderr)
        return EXIT_USAGE


__all__ = ["build_parser", "main"]
