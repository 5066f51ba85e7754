"""
Logging setup for the valuesguard CLI and validation API.

Modules log through ``logging.getLogger(__name__)``; this module only
decides where records go. The console level comes from the CLI flags or
``VG_LOG_LEVEL``; ``VG_LOG_FILE`` adds a file that may be more verbose
than the console (``VG_LOG_FILE_LEVEL``).
"""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "VG_LOG_LEVEL"
LOG_FILE_ENV = "VG_LOG_FILE"
LOG_FILE_LEVEL_ENV = "VG_LOG_FILE_LEVEL"

# Console output is plain at WARNING, where it carries violations only
_CONSOLE_FORMATS = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
}
_FILE_FORMAT = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s", "%Y-%m-%d %H:%M:%S")

# Flask's dev server logs every request at INFO
_QUIETED_LOGGERS = ("werkzeug", "urllib3")


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Console level: --debug > --verbose > --quiet > VG_LOG_LEVEL > WARNING."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LOG_LEVEL_ENV, "WARNING")


def _console_formatter(level: int) -> logging.Formatter:
    for threshold in (logging.DEBUG, logging.INFO):
        if level <= threshold:
            fmt, datefmt = _CONSOLE_FORMATS[threshold]
            return logging.Formatter(fmt, datefmt=datefmt)
    return logging.Formatter("%(message)s")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Replace the root handlers with a stderr handler and an optional file.

    The root logger is set to the lower of the two handler levels so a
    DEBUG log file still receives records while the console stays quiet.
    """
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))
    handlers: list[logging.Handler] = [console]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        to_file = logging.FileHandler(log_file, encoding="utf-8")
        to_file.setLevel(file_level)
        to_file.setFormatter(logging.Formatter(_FILE_FORMAT[0], datefmt=_FILE_FORMAT[1]))
        handlers.append(to_file)

    root = logging.getLogger()
    root.handlers[:] = handlers
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _QUIETED_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def setup_from_env(level: str) -> None:
    """``setup_logging`` with the log file taken from ``VG_LOG_FILE*``."""
    setup_logging(
        level=level,
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
        quiet_third_party=_parse_level(level) > logging.DEBUG,
    )


def _parse_level(level: str | None) -> int:
    """Level name to number; unknown or empty names mean WARNING."""
    numeric = getattr(logging, level.upper(), None) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
