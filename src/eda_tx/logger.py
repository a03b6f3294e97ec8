#!/usr/bin/env python3
"""EDA bridge - logging.

Console output is coloured (via colorlog), and split by severity: WARNING and
above go to stderr, everything else to stdout. Optionally, also log to a file.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime as dt
from logging.handlers import TimedRotatingFileHandler
from typing import Final

import colorlog

from .version import VERSION

CONSOLE_FMT: Final = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOGFILE_FMT: Final = "%(asctime)s %(levelname)-7s %(name)s %(threadName)s: %(message)s"

LOG_COLOURS: Final = {
    "DEBUG": "white",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "bold_red",
    "CRITICAL": "bold_red",
}


class _MsecFormatter:
    """Format asctime as local ISO 8601, to the millisecond."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        timestamp = dt.fromtimestamp(record.created)
        if datefmt:
            return timestamp.strftime(datefmt)
        return timestamp.isoformat(timespec="milliseconds")


class ColoredFormatter(_MsecFormatter, colorlog.ColoredFormatter):  # type: ignore[misc]
    pass


class Formatter(_MsecFormatter, logging.Formatter):  # type: ignore[misc]
    pass


class _LevelFilter(logging.Filter):
    """Pass only those records with a level in [minimum, maximum)."""

    def __init__(self, minimum: int, maximum: int = logging.CRITICAL + 1) -> None:
        super().__init__()
        self._minimum = minimum
        self._maximum = maximum

    def filter(self, record: logging.LogRecord) -> bool:
        return self._minimum <= record.levelno < self._maximum


def _console_handler(
    stream: object, formatter: logging.Formatter, level_filter: logging.Filter
) -> logging.Handler:
    handler = logging.StreamHandler(stream=stream)  # type: ignore[arg-type]
    handler.setFormatter(formatter)
    handler.addFilter(level_filter)
    return handler


def set_logging(
    logger: logging.Logger,
    level: int = logging.INFO,
    use_color: bool = True,
    file_name: str | None = None,
    rotate_backups: int = 0,
) -> None:
    """Create/configure the handlers of a logger (usu. the root logger).

    Parameters:
    - use_color:      colour the console output
    - file_name:      also log to this file (at DEBUG, regardless of level)
    - rotate_backups: keep this many old log files, rotating at midnight
    """

    logger.setLevel(logging.DEBUG if file_name else level)

    # set_logging() may be called more than once
    for hdlr in list(logger.handlers):
        logger.removeHandler(hdlr)

    console_fmt: logging.Formatter
    if use_color:
        console_fmt = ColoredFormatter(
            fmt=f"%(log_color)s{CONSOLE_FMT}", reset=True, log_colors=LOG_COLOURS
        )
    else:
        console_fmt = Formatter(fmt=CONSOLE_FMT)

    stderr_filter = _LevelFilter(max(level, logging.WARNING))
    stdout_filter = _LevelFilter(level, logging.WARNING)

    logger.addHandler(_console_handler(sys.stderr, console_fmt, stderr_filter))
    logger.addHandler(_console_handler(sys.stdout, console_fmt, stdout_filter))

    if file_name:
        handler: logging.Handler
        if rotate_backups:
            handler = TimedRotatingFileHandler(
                file_name, when="midnight", backupCount=rotate_backups
            )
        else:
            handler = logging.FileHandler(file_name)

        handler.setFormatter(Formatter(fmt=LOGFILE_FMT))
        logger.addHandler(handler)

    logger.info("eda_bridge %s, logging at %s", VERSION, logging.getLevelName(level))
