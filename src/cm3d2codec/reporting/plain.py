from __future__ import annotations

import sys
from typing import Any, Dict, TextIO

from .base import Reporter, TaskRecord, TaskStatus, format_stats, get_verbosity

_ICONS = {
    TaskStatus.SUCCESS: "✔",
    TaskStatus.FAILED: "✖",
}

# (label, ANSI color) per message level
_LEVELS = {
    "info": ("INFO", "32"),
    "warning": ("WARN", "33"),
    "error": ("ERROR", "31"),
}


class PlainReporter(Reporter):
    """One line per event on stderr, colored when writing to a terminal."""

    def __init__(self, stream: TextIO | None = None, use_color: bool | None = None):
        super().__init__()
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color

    def _write(self, text: str) -> None:
        print(text, file=self.stream)

    def _label(self, level: str) -> str:
        label, color = _LEVELS[level]
        return f"\x1b[{color}m{label}\x1b[0m" if self.use_color else label

    def _on_advance(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        if get_verbosity() >= 1:
            item = meta.get("file") or f"#{rec.completed}"
            self._write(f"   · {rec.name}: {item}{rec.progress_text}")

    def _on_end(self, rec: TaskRecord) -> None:
        icon = _ICONS.get(rec.status, "?")
        self._write(
            f" {icon} {rec.name}{rec.progress_text} ({rec.duration:.2f}s){format_stats(rec.meta)}"
        )

    def status(self, message: str, **fields: Any) -> None:
        self._write(f"{self._label('info')}: {message}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._write(f"VERB{level}: {message}")

    def warning(self, message: str, **fields: Any) -> None:
        self._write(f"{self._label('warning')}: {message}")

    def error(self, message: str, **fields: Any) -> None:
        self._write(f"{self._label('error')}: {message}")

    def section(self, title: str) -> None:
        self._write(f"\n[{title}]")
