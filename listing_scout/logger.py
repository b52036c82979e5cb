# === FILE: listing_scout/logger.py ===
"""Logging setup for **ListingScout**.

All records go through one project logger, ``ListingScout``.  Modules ask for
a child named after their component::

      from listing_scout.logger import get_logger
      logger = get_logger(__name__)      # -> "ListingScout.crawler.scheduler"

Children carry no handlers of their own; :func:`configure` attaches the
console and (rotating) file handlers to the project logger only, so one call
from the CLI re-routes every component.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, Union

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "ListingScout"
_PACKAGE: Final[str] = "listing_scout"

_LevelT = Union[int, str]


def _formatted(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Project logger, or its child for *component* (a module ``__name__`` works)."""
    root = logging.getLogger(LOGGER_NAME)
    if not component or component == _PACKAGE:
        return root
    if component.startswith(_PACKAGE + "."):
        component = component[len(_PACKAGE) + 1:]
    return root.getChild(component)


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
    stream: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    ``stream=False`` leaves stdout alone (the CLI prints records there); with
    neither a stream nor a file the logger gets a ``NullHandler`` so nothing
    leaks to Python's last-resort stderr handler.
    """
    lg = get_logger()
    lg.setLevel(level)

    if replace_handlers:
        lg.handlers.clear()
    if stream:
        lg.addHandler(_formatted(logging.StreamHandler(sys.stdout), log_format))
    if log_file is not None:
        rotating = RotatingFileHandler(str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        lg.addHandler(_formatted(rotating, log_format))
    if not lg.handlers:
        lg.addHandler(logging.NullHandler())

    lg.propagate = False
    return lg


logger: logging.Logger = configure()

__all__ = ["logger", "configure", "get_logger", "LOGGER_NAME"]
