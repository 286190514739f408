"""
Dual-sink logging for the placement mock server.

Every frame a session sends or receives is logged at INFO, to stdout and to
a log file, so a run driven by a remote front end can be replayed from the
log afterwards. Third-party loggers are held at WARNING unless verbose.
"""

import sys
import logging
from pathlib import Path
from typing import Iterable, List, Optional


# Log file paths (in order of preference)
LOG_FILE_PATHS = [
    "/var/log/placement_mock.log",
    "/tmp/placement_mock.log",
]

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# websockets logs every handshake and keepalive at INFO/DEBUG
NOISY_LOGGERS = ("websockets",)

PACKAGE_LOGGER = "placement_mock"


def _writable_log_path(candidates: Iterable[str]) -> Optional[str]:
    for path in candidates:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'a'):
                pass
            return path
        except OSError:
            continue
    return None


def _build_handlers(level: int, formatter: logging.Formatter,
                    log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    file_path = log_file if log_file is not None else _writable_log_path(LOG_FILE_PATHS)
    if file_path:
        try:
            handlers.append(logging.FileHandler(file_path, mode='a'))
        except OSError as e:
            print(f"Warning: Could not setup file logging at {file_path}: {e}",
                  file=sys.stderr)

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None,
                  log_format: Optional[str] = None,
                  noisy_loggers: Iterable[str] = NOISY_LOGGERS) -> logging.Logger:
    """
    Route logging to stdout and a log file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        verbose: DEBUG instead of INFO, including unknown-type notices and
            the library loggers in ``noisy_loggers``
        log_file: Log file path. If None, the first writable entry of
            LOG_FILE_PATHS is used; if none is writable, stdout only.
        log_format: Override log format string
        noisy_loggers: Loggers held at WARNING unless verbose

    Returns:
        The placement_mock package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter(log_format or DEFAULT_LOG_FORMAT)

    logging.basicConfig(
        level=level,
        handlers=_build_handlers(level, formatter, log_file),
        force=True,
    )

    for name in noisy_loggers:
        logging.getLogger(name).setLevel(level if verbose else logging.WARNING)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module (pass __name__)."""
    return logging.getLogger(name)
