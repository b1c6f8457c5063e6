"""Progress reporting for the sync command."""

from __future__ import annotations

from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

from ..processor import DuplicateEvent, PageEvent, ProcessingEvent, SyncEvent


def create_progress() -> Progress:
    """Create a standard Rich progress bar."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
    )


class SyncProgressReporter:
    """Feed sync events into a Rich progress task."""

    def __init__(self, progress: Progress, task_id: TaskID, label: str = "Syncing") -> None:
        self._progress = progress
        self._task_id = task_id
        self._label = label
        self._count = 0
        self._total = 0
        self.new = 0
        self.duplicates = 0

    def _refresh(self, **kwargs) -> None:
        self._progress.update(
            self._task_id,
            description=f"{self._label} ({self._count}/{self._total})",
            **kwargs,
        )

    def handle(self, event: SyncEvent) -> None:
        if isinstance(event, PageEvent):
            self._total += event.items_found
            self._label = f"Page {event.page_number}"
            self._refresh(total=self._total)
        elif isinstance(event, ProcessingEvent):
            self.new += 1
            self._count = min(self._total, self._count + 1)
            self._label = f"@{event.author}"
            self._refresh(advance=1)
        elif isinstance(event, DuplicateEvent):
            self.duplicates += 1
            self._count = min(self._total, self._count + 1)
            self._refresh(advance=1)
