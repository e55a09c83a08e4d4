"""
Logging utilities for reqbump.

Every reqbump module logs through :func:`get_logger`, so the engine stays
silent inside other applications until :func:`setup_logging` is called (the
CLI does this once per invocation). Messages about a single requirement
occurrence go through :func:`occurrence_logger`, which prefixes them with
the manifest the requirement came from::

    log = occurrence_logger(get_logger("core.updater"), "mix.exs")
    log.info("Cannot update %s", "plug")   # INFO: mix.exs: Cannot update plug
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Any, MutableMapping, Optional, Tuple

from reqbump.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

_ROOT_LOGGER_NAME = "reqbump"

_LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
_RESET = "\033[0m"

_logging_configured: bool = False
_lock = threading.Lock()


def _stderr_supports_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stderr.isatty()
    except (AttributeError, OSError):
        return False


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name on a terminal.

    The record handed to other handlers is never modified; coloring happens
    on a copy.
    """

    COLORS = {logging.getLevelName(level): code for level, code in _LEVEL_COLORS.items()}
    RESET = _RESET

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelno)
        if color and self.use_color and self._should_use_color():
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{_RESET}"
        return super().format(record)

    @staticmethod
    def _should_use_color() -> bool:
        return _stderr_supports_color()


class OccurrenceAdapter(logging.LoggerAdapter):
    """Prefix messages with the manifest file of a requirement occurrence."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"{self.extra['file']}: {msg}", kwargs


def occurrence_logger(logger: logging.Logger, file: str) -> OccurrenceAdapter:
    """Wrap ``logger`` so every message names ``file``."""
    return OccurrenceAdapter(logger, {"file": file})


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
    color: Optional[bool] = None,
) -> None:
    """Attach a single stream handler to the ``reqbump`` logger.

    Calling it again replaces the previous handler, so repeated CLI
    invocations in one process do not duplicate output.

    Args:
        level: Minimum level to emit.
        verbose: Include timestamps and logger names.
        stream: Destination; ``sys.stderr`` by default.
        color: Force colors on or off. ``None`` honours ``NO_COLOR``.
    """
    global _logging_configured

    if color is None:
        color = not os.environ.get("NO_COLOR")

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        ColoredFormatter(
            LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            use_color=color,
        )
    )

    with _lock:
        root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
        root_logger.handlers[:] = [handler]
        root_logger.setLevel(level)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger in the ``reqbump`` hierarchy.

    ``name`` may be relative (``"core.parser"``) or already qualified
    (``"reqbump.core.parser"``); ``None`` returns the package logger.
    """
    if name and name != _ROOT_LOGGER_NAME and not name.startswith(f"{_ROOT_LOGGER_NAME}."):
        name = f"{_ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name or _ROOT_LOGGER_NAME)

    # Stay quiet in host applications that never configure logging
    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def is_logging_configured() -> bool:
    """Return True once :func:`setup_logging` has run."""
    return _logging_configured


def disable_logging() -> None:
    """Silence the ``reqbump`` logger until :func:`setup_logging` runs again."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
        root_logger.handlers[:] = [logging.NullHandler()]
        root_logger.setLevel(logging.NOTSET)
        _logging_configured = False
