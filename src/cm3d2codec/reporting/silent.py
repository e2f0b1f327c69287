from __future__ import annotations

from .base import Reporter


class SilentReporter(Reporter):
    """Keeps task bookkeeping but prints nothing (``--reporter silent``)."""

    @property
    def open_tasks(self) -> int:
        return len(self._tasks)
