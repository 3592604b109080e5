"""Per-package progress reporting."""
from typing import Optional, Protocol

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressSink(Protocol):
    """What a package pipeline needs from a progress indicator."""

    def set_total(self, total: Optional[int]) -> None: ...

    def set_position(self, position: int) -> None: ...

    def set_message(self, message: str) -> None: ...

    def finish(self, message: str) -> None: ...


class ProgressBoard(Protocol):
    """Hands out one sink per package."""

    def add(self, name: str) -> ProgressSink: ...


class NullProgressSink:
    """Sink that discards every update."""

    def set_total(self, total: Optional[int]) -> None:
        pass

    def set_position(self, position: int) -> None:
        pass

    def set_message(self, message: str) -> None:
        pass

    def finish(self, message: str) -> None:
        pass


class RichProgressSink:
    """Sink bound to a single task of a shared rich Progress."""

    def __init__(self, progress: Progress, task_id: TaskID):
        self._progress = progress
        self._task_id = task_id

    def set_total(self, total: Optional[int]) -> None:
        self._progress.update(self._task_id, total=total)

    def set_position(self, position: int) -> None:
        self._progress.update(self._task_id, completed=position)

    def set_message(self, message: str) -> None:
        self._progress.update(self._task_id, description=message)

    def finish(self, message: str) -> None:
        task = next(t for t in self._progress.tasks if t.id == self._task_id)
        # An indeterminate bar is closed off at whatever was received
        total = task.total if task.total is not None else task.completed
        self._progress.update(
            self._task_id, description=message, total=total, completed=total
        )
        self._progress.stop_task(self._task_id)


class RichProgressBoard:
    """Shared progress display with one line per package.

    rich.Progress serialises updates with an internal lock, so sinks may be
    driven concurrently from any number of units.
    """

    def __init__(self, console: Optional[Console] = None):
        self.progress = Progress(
            TimeElapsedColumn(),
            BarColumn(bar_width=40),
            DownloadColumn(),
            TextColumn("{task.description}"),
            console=console,
        )

    def add(self, name: str) -> RichProgressSink:
        task_id = self.progress.add_task(f"Installing {name}", total=None)
        return RichProgressSink(self.progress, task_id)

    def __enter__(self) -> "RichProgressBoard":
        self.progress.start()
        return self

    def __exit__(self, *exc) -> None:
        self.progress.stop()


class NullProgressBoard:
    """Board handing out sinks that render nothing."""

    def add(self, name: str) -> NullProgressSink:
        return NullProgressSink()
