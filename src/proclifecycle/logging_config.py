"""
Logging setup shared by the CLI and test harnesses.

setup_logging() installs:
- a console handler on stderr, so command output on stdout stays parseable
- a file handler at {PROCLIFECYCLE_LOG_DIR}/{service_name}.log when both are set

The log file is truncated on each setup unless PROCLIFECYCLE_LOG_APPEND is true.
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional

from .config import ENV_PREFIX, env_bool, load_settings

_setup_lock = threading.Lock()
_logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty at INFO during every poll iteration
_NOISY_LOGGERS = ("asyncio", "aiohttp", "urllib3")


def _formatter() -> logging.Formatter:
    return logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)


def _detach_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        root.removeHandler(handler)
        try:
            handler.close()
        except OSError as exc:
            _logger.debug("Closing log handler %r failed: %s", handler, exc)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter())
    handler.setLevel(level)
    return handler


def _file_handler(service_name: Optional[str], log_dir: Optional[Path]) -> Optional[logging.Handler]:
    if not service_name or log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    append = env_bool(f"{ENV_PREFIX}LOG_APPEND", or_value=False)
    # Watched so external log rotation of harness logs is picked up
    handler = logging.handlers.WatchedFileHandler(log_dir / f"{service_name}.log", mode="a" if append else "w")
    handler.setFormatter(_formatter())
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logging(service_name: Optional[str] = None, verbose: bool = False) -> None:
    """Replace the root logger's handlers; DEBUG on the console when ``verbose``."""
    level = logging.DEBUG if verbose else logging.INFO

    with _setup_lock:
        root = logging.getLogger()
        _detach_handlers(root)
        root.addHandler(_console_handler(level))

        file_handler = _file_handler(service_name, load_settings().log_dir)
        if file_handler is not None:
            root.addHandler(file_handler)

        root.setLevel(level)
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["setup_logging"]
