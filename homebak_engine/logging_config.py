"""
Logging configuration, called once at CLI startup.

Every engine module logs through ``logging.getLogger(__name__)`` and inherits
this setup. Level precedence: CLI flags (--debug, --quiet) > ``HOMEBAK_LOG_LEVEL`` > INFO.
``HOMEBAK_LOG_FILE`` adds a file handler at full detail.
"""

from __future__ import annotations

import logging
import sys

_FMT_MINIMAL = "%(levelname)s: %(message)s"

_FMT_VERBOSE = "%(asctime)s %(levelname)s %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

DEFAULT_LEVEL = "INFO"


def setup_logging(level: str | None = DEFAULT_LEVEL, log_file: str | None = None) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    level:
        Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL). Unknown names
        fall back to INFO.
    log_file:
        Optional path to a log file that always receives DEBUG output.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    effective_level = numeric_level

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(file_handler)
        effective_level = logging.DEBUG

    root.setLevel(effective_level)


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.INFO
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
