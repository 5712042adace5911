"""Rich progress display for the extraction stage."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.status import Status
from rich.text import Text

URL_DISPLAY_WIDTH = 60


@dataclass
class ProgressState:
    """Counters behind the progress row, kept even when nothing is drawn."""

    total: int
    success: int = 0
    failed: int = 0
    skipped: int = 0
    current_url: str | None = None

    @property
    def done(self) -> int:
        return self.success + self.failed + self.skipped

    def record(self, success: bool, failed: bool, skipped: bool) -> None:
        self.success += int(success)
        self.failed += int(failed)
        self.skipped += int(skipped)

    def fields(self) -> dict[str, object]:
        return {
            "success": self.success,
            "failed": self.failed,
            "skipped": self.skipped,
            "current_url": _shorten(self.current_url or ""),
        }


def _shorten(url: str, width: int = URL_DISPLAY_WIDTH) -> str:
    if len(url) <= width:
        return url
    return url[: width - 3] + "..."


class RateColumn(ProgressColumn):
    """Links processed per second."""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed
        label = f"{speed:.1f} link/s" if speed is not None else ""
        return Text(label, style="progress.percentage")


def _columns() -> list[ProgressColumn]:
    return [
        SpinnerColumn(style="cyan"),
        TextColumn("[bold blue]{task.fields[label]:<12}"),
        BarColumn(bar_width=None, complete_style="green", finished_style="green"),
        TaskProgressColumn(show_speed=False),
        TimeElapsedColumn(),
        RateColumn(),
        TextColumn("[green]✓{task.fields[success]:>3}", justify="right"),
        TextColumn("[red]✗{task.fields[failed]:>3}", justify="right"),
        TextColumn("[yellow]↺{task.fields[skipped]:>3}", justify="right"),
        TextColumn("[dim]{task.fields[current_url]}"),
    ]


class ProgressReporter:
    """Per-link extraction progress with one labelled row per run."""

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self.console = console
        self.state: ProgressState | None = None
        self.label = "extract"
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None

    @property
    def live(self) -> bool:
        return self._progress is not None and self._task_id is not None

    def start(self, total: int) -> None:
        self.state = ProgressState(total=total)
        if not self.enabled:
            return
        console = self.console or Console()
        if not console.is_terminal:
            self.enabled = False
            return
        progress = Progress(
            *_columns(), console=console, transient=True, expand=True, refresh_per_second=12
        )
        try:
            progress.start()
        except LiveError:
            self.enabled = False
            return
        self.console = console
        self._progress = progress
        self._task_id = progress.add_task(
            "extract", total=total, label=self.label, **self.state.fields()
        )

    def set_label(self, label: str) -> None:
        """Rename the progress row, e.g. to the batch currently running."""

        self.label = label
        if self.live:
            self._progress.update(self._task_id, label=label)

    def advance(
        self,
        success: bool = False,
        failed: bool = False,
        skipped: bool = False,
        current_url: str | None = None,
    ) -> None:
        if self.state is None:
            raise RuntimeError("ProgressReporter.start must be called before advance")
        self.state.record(success, failed, skipped)
        if current_url:
            self.state.current_url = current_url
        if self.live:
            self._progress.update(self._task_id, advance=1, **self.state.fields())

    def close(self) -> None:
        if self.live and self.state is not None:
            self._progress.update(self._task_id, completed=self.state.done, current_url="done")
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task_id = None


class ProgressActivity:
    """Spinner shown while a step of unknown length runs."""

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self.console = console or Console()
        self._status: Status | None = None

    def start(self, message: str) -> None:
        if self.enabled and self._status is None:
            self._status = self.console.status(message)
            self._status.start()

    def close(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def __enter__(self) -> "ProgressActivity":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["ProgressActivity", "ProgressReporter", "ProgressState"]
