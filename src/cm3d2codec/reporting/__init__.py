"""Pluggable progress and status output.

The active reporter is process-global; the CLI picks one with
``make_reporter`` and library code reaches it through ``get_reporter``.
"""

from __future__ import annotations

import sys

from .base import (
    Reporter,
    TaskStatus,
    get_reporter,
    get_verbosity,
    section,
    set_reporter,
    set_verbosity,
    task,
)
from .jsonl import JsonLinesReporter
from .plain import PlainReporter
from .rich_reporter import RichReporter
from .silent import SilentReporter

REPORTER_NAMES = ("plain", "rich", "json", "silent")


def make_reporter(name: str) -> Reporter:
    """Build the backend selected by ``--reporter``.

    ``rich`` falls back to plain output when stderr is not a terminal.
    """
    if name == "json":
        return JsonLinesReporter()
    if name == "silent":
        return SilentReporter()
    if name == "rich" and sys.stderr.isatty():
        return RichReporter()
    return PlainReporter()


__all__ = [
    "REPORTER_NAMES",
    "Reporter",
    "TaskStatus",
    "make_reporter",
    "get_reporter",
    "set_reporter",
    "section",
    "task",
    "set_verbosity",
    "get_verbosity",
    "PlainReporter",
    "JsonLinesReporter",
    "SilentReporter",
    "RichReporter",
]
