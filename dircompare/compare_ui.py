from __future__ import annotations

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)


class CompareProgressUI:
    """Rich progress bar fed by the comparison engine's progress callback."""

    def __init__(self, console: Console | None = None, *, transient: bool = True) -> None:
        self._task_id: TaskID | None = None
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]Comparing"),
            BarColumn(),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            TimeRemainingColumn(),
            console=console,
            transient=transient,
            expand=True,
        )

    def __enter__(self) -> "CompareProgressUI":
        self._progress.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._progress.__exit__(exc_type, exc, tb)

    def update(self, processed: int, total: int) -> None:
        if self._task_id is None:
            self._task_id = self._progress.add_task("compare", total=total)
        self._progress.update(self._task_id, completed=processed, total=total)
