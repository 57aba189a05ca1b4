from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Optional

PACKAGE_LOGGER = "rc4crypt"
LOG_FORMAT = "[%(command)s] %(levelname)s: %(message)s"

# Active subcommand, picked up by every record
_current_command: ContextVar[str] = ContextVar("rc4crypt_current_command", default="rc4crypt")


class _CommandFilter(logging.Filter):
    """Label each record with the subcommand that emitted it."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.command = getattr(record, "command", None) or _current_command.get()
        return True


class _StderrHandler(logging.StreamHandler):
    """Always writes to the current ``sys.stderr``; stdout may carry cipher output."""

    def __init__(self):
        super().__init__(sys.stderr)

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def log_level(verbose: bool, debug: bool) -> int:
    """``--debug`` shows per-chunk detail, ``-v`` the informative messages."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(command: str, verbose: bool = False, debug: bool = False) -> logging.Logger:
    """
    Configure the package logger for one subcommand.

    Safe to call repeatedly in one process: the stderr handler is attached once.
    """
    _current_command.set(command)
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, _StderrHandler) for h in logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(_CommandFilter())
        logger.addHandler(handler)
    logger.setLevel(log_level(verbose, debug))
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Convenience wrapper to keep imports centralized."""
    return logging.getLogger(name if name is not None else PACKAGE_LOGGER)
