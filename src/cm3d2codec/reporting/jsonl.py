from __future__ import annotations

import json
import sys
from typing import Any, Dict, TextIO

from .base import Reporter, TaskRecord, get_verbosity


class JsonLinesReporter(Reporter):
    """One JSON object per event on stdout (``--reporter json``)."""

    def __init__(self, stream: TextIO | None = None):
        super().__init__()
        self.stream = stream or sys.stdout

    def _emit(self, event: str, **payload: Any) -> None:
        record = {"event": event, **payload}
        self.stream.write(json.dumps(record, sort_keys=True, default=str) + "\n")

    def _on_start(self, rec: TaskRecord) -> None:
        self._emit("task_start", id=rec.task_id, name=rec.name, total=rec.total, **rec.meta)

    def _on_advance(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        self._emit("task_progress", id=rec.task_id, completed=rec.completed, **meta)

    def _on_end(self, rec: TaskRecord) -> None:
        self._emit(
            "task_end",
            id=rec.task_id,
            status=rec.status.name.lower(),
            completed=rec.completed,
            total=rec.total,
            duration_seconds=rec.duration,
            **rec.meta,
        )

    def summary(self, kind: str, **fields: Any) -> None:
        self._emit("summary", summary_type=kind, **fields)

    def _message(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        self._emit("status", message=message, level=level, **fields)

    def status(self, message: str, **fields: Any) -> None:
        self._message("info", message, fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._message(f"verbose{level}", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._message("warning", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._message("error", message, fields)

    def section(self, title: str) -> None:
        self._emit("section", title=title)
