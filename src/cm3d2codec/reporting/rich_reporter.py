from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .base import Reporter, TaskRecord, TaskStatus, format_stats, get_verbosity

_ICONS = {
    TaskStatus.SUCCESS: "[green]✔[/]",
    TaskStatus.FAILED: "[red]✖[/]",
}


def _transient_default() -> bool:
    raw = os.getenv("CM3D2CODEC_PROGRESS_TRANSIENT", "0")
    return raw.lower() in ("1", "true", "yes", "on")


class RichReporter(Reporter):
    """Console output through ``rich`` with a progress bar for counted tasks.

    Counted tasks (a ``total`` was given) get a progress bar; single-file
    tasks only print a completion line. With
    ``CM3D2CODEC_PROGRESS_TRANSIENT`` set, bars are cleared when done and
    completion lines are printed after them.
    """

    def __init__(self, console: Console | None = None, transient: bool | None = None):
        super().__init__()
        self.console = console or Console(stderr=True, highlight=False)
        self.transient = _transient_default() if transient is None else transient
        self._progress: Progress | None = None
        self._bars: Dict[str, TaskID] = {}
        self._deferred: List[str] = []

    def _bar(self) -> Progress:
        if self._progress is None:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(bar_width=None),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=self.console,
                transient=self.transient,
            )
            self._progress.start()
        return self._progress

    def _on_start(self, rec: TaskRecord) -> None:
        if rec.total is not None:
            self._bars[rec.task_id] = self._bar().add_task(rec.name, total=rec.total)

    def _on_advance(self, rec: TaskRecord, meta: Dict[str, Any]) -> None:
        bar = self._bars.get(rec.task_id)
        if bar is not None and self._progress is not None:
            self._progress.update(bar, completed=rec.completed)

    def _on_end(self, rec: TaskRecord) -> None:
        bar = self._bars.pop(rec.task_id, None)
        if bar is not None and self._progress is not None:
            self._progress.update(bar, completed=rec.total)
        line = (
            f"{_ICONS.get(rec.status, '?')} {rec.name}{rec.progress_text} "
            f"[dim]({rec.duration:.2f}s){format_stats(rec.meta)}[/]"
        )
        if self.transient and self._progress is not None:
            self._deferred.append(line)
        else:
            self.console.print(line)
        if not self._bars:
            self.flush()

    def summary(self, kind: str, **fields: Any) -> None:
        table = Table(title=f"{kind.capitalize()} summary", show_header=False)
        table.add_column(style="cyan")
        table.add_column()
        for key, value in fields.items():
            table.add_row(key, str(value))
        self.console.print(table)

    def status(self, message: str, **fields: Any) -> None:
        self.console.print(f"[green]INFO[/]: {message}")

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self.console.print(f"[cyan]VERB{level}[/]: {message}")

    def warning(self, message: str, **fields: Any) -> None:
        self.console.print(f"[yellow]WARN[/]: {message}")

    def error(self, message: str, **fields: Any) -> None:
        self.console.print(f"[bold red]ERROR[/]: {message}")

    def section(self, title: str) -> None:
        self.console.rule(title)

    def flush(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
        for line in self._deferred:
            self.console.print(line)
        self._deferred.clear()
