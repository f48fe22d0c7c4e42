"""
Logging setup for LIFO Script tools.

The library only creates loggers (``logging.getLogger(__name__)``); handlers
are installed here, by the command-line front end.

Console output goes through rich's ``RichHandler``. A log file, when asked
for, captures everything down to DEBUG with a timestamped format.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "lifoscript"


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[Path] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Calling it again replaces the handlers installed by the previous call,
    so the CLI can be invoked repeatedly in one process (tests do).
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG if log_file is not None else console_level)

    # ── Console handler: WARNING+ unless --verbose ──
    ch = RichHandler(
        level=console_level,
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    ch.setLevel(console_level)
    logger.addHandler(ch)

    # ── File handler: captures everything (DEBUG+) ──
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(fh)
        logger.debug("Log file: %s", log_file)

    return logger
