"""
Logging for SmartReports.

The package logs under the ``smartreports`` logger and installs only a
``NullHandler`` on import, so a host application keeps full control of its
own logging. :func:`setup_logging` is opt-in: it attaches one handler to the
package logger (JSON lines for production, colored text for development)
and never touches the root logger's handlers.
"""

import logging
import sys
from typing import IO, Any, Optional

import orjson

from smartreports.core.config import Settings, settings as default_settings

PACKAGE_LOGGER = "smartreports"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Marks the handler installed by setup_logging so it can be replaced.
_HANDLER_NAME = "smartreports-setup"


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ``extra`` values are nested under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra

        return orjson.dumps(entry, default=str).decode("utf-8")


class ConsoleFormatter(logging.Formatter):
    """Human-readable lines with the level colored and ``extra`` appended."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s - %(message)s"

    def __init__(self, fmt: Optional[str] = None, colors: bool = True) -> None:
        super().__init__(fmt or self.DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        self.colors = colors

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if self.colors:
            color = self.COLORS.get(record.levelname, "")
            line = line.replace(record.levelname, f"{color}{record.levelname}{self.RESET}", 1)

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            line += " " + orjson.dumps(extra, default=str).decode("utf-8")
        return line


def setup_logging(
    settings: Optional[Settings] = None,
    *,
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Attach a handler to the ``smartreports`` logger.

    Level and output format default to ``settings.log_level`` and
    ``settings.json_logs``. Calling it again replaces the handler it
    installed earlier; other handlers are left alone.

    Args:
        settings: Settings to read defaults from
        log_level: Overrides ``settings.log_level``
        json_logs: Overrides ``settings.json_logs``
        stream: Output stream (default: stderr)

    Returns:
        The package logger
    """
    settings = settings or default_settings
    level = (log_level or settings.log_level).upper()
    as_json = settings.json_logs if json_logs is None else json_logs

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in [h for h in logger.handlers if h.get_name() == _HANDLER_NAME]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if as_json else ConsoleFormatter())
    logger.addHandler(handler)
    logger.setLevel(level)

    logger.debug("Logging configured", extra={"log_level": level, "json_logs": as_json})
    return logger


class LoggerMixin:
    """
    Mixin class that provides a logger attribute.

    Classes that inherit from this mixin get a logger named after the class.
    """

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class."""
        return logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)


logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())
