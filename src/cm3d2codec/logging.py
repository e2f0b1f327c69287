"""Stdlib logging routed through the active reporter.

Codec modules log through ``get_logger()``; the CLI calls
``configure_logging`` once so records show up in whichever reporter
backend was selected.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .reporting import get_reporter, get_verbosity

__all__ = [
    "LOGGER_NAME",
    "get_logger",
    "configure_logging",
    "section",
    "step",
]

LOGGER_NAME = "cm3d2codec"


class ReporterHandler(logging.Handler):
    """Forward records to ``get_reporter()`` at call time."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:  # pragma: no cover - formatting errors
            self.handleError(record)
            return
        rep = get_reporter()
        if record.levelno >= logging.ERROR:
            rep.error(message, logger=record.name)
        elif record.levelno >= logging.WARNING:
            rep.warning(message, logger=record.name)
        elif record.levelno >= logging.INFO:
            rep.status(message, logger=record.name)
        else:
            # Codec decode/encode traces; shown from -vv upward.
            rep.verbose(message, level=2, logger=record.name)


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def configure_logging(verbosity: int = 0) -> logging.Logger:
    logger = get_logger()
    logger.setLevel(logging.DEBUG if verbosity > 0 else logging.INFO)
    for old in [h for h in logger.handlers if isinstance(h, ReporterHandler)]:
        logger.removeHandler(old)
    handler = ReporterHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def step(message: str) -> None:
    get_reporter().status(f"  -> {message}")


@contextmanager
def section(title: str) -> Iterator[logging.Logger]:
    get_reporter().section(title)
    yield get_logger()
    if get_verbosity() >= 2:
        get_logger().debug("end of section %s", title)
