from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "Reporter",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "section",
    "task",
    "format_fields",
    "format_stats",
]

# Task metadata shown after a finished task, in this order.
STAT_KEYS = ("file", "bytes", "elements", "properties", "rects")


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        return (self.end_time - self.start_time) if self.end_time else 0.0

    @property
    def progress_text(self) -> str:
        if self.total is None:
            return ""
        return f" {self.completed}/{self.total}"


def format_fields(fields: Dict[str, Any]) -> str:
    return " ".join(f"{k}={v}" for k, v in fields.items())


def format_stats(meta: Dict[str, Any]) -> str:
    shown = {k: meta[k] for k in STAT_KEYS if k in meta}
    return f" [{format_fields(shown)}]" if shown else ""


_VERBOSITY = 0


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    """Sink for task progress, summaries and status messages.

    The base class keeps task bookkeeping and discards all output; backends
    override the ``_on_*`` hooks and the message methods they render.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, TaskRecord] = {}

    # Tasks -------------------------------------------------------------------
    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        rec = TaskRecord(task_id, name, total, meta=dict(meta))
        self._tasks[task_id] = rec
        self._on_start(rec)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._tasks.get(task_id)
        if rec is None:
            return
        rec.completed += step
        self._on_advance(rec, meta)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._tasks.pop(task_id, None)
        if rec is None:
            return
        rec.status = status
        rec.end_time = time.time()
        rec.meta.update(final_meta)
        self._on_end(rec)

    def _on_start(self, rec: TaskRecord) -> None:
        pass

    def _on_advance(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        pass

    def _on_end(self, rec: TaskRecord) -> None:
        pass

    # Messages ----------------------------------------------------------------
    def summary(self, kind: str, **fields: Any) -> None:
        """Report the outcome of one operation, e.g. ``summary("col", elements=3)``."""
        self.status(f"{kind.capitalize()} summary: {format_fields(fields)}")

    def status(self, message: str, **fields: Any) -> None:
        pass

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        pass

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        pass

    def section(self, title: str) -> None:
        pass

    def flush(self) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        from .plain import PlainReporter

        _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
    return _ACTIVE_REPORTER


@contextmanager
def section(title: str) -> Iterator[Reporter]:
    rep = get_reporter()
    rep.section(title)
    yield rep


@contextmanager
def task(
    task_id: str, name: str, total: int | None = None, **meta: Any
) -> Iterator[Reporter]:
    """Run a block as a reported task; an exception marks it failed."""
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    try:
        yield rep
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED)
        raise
    rep.end_task(task_id, TaskStatus.SUCCESS)
