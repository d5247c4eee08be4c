"""cpubench.console._rich -- Rich-based terminal backend.

Coloured, structured output using the Rich library, including a live
progress bar while a run is in flight.
"""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.theme import Theme

from cpubench.console._format import comparison_rows, result_rows
from cpubench.domain.models import BenchmarkResult, Comparison

_THEME = Theme(
    {
        "info": "blue",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "score": "bold cyan",
        "dim": "dim",
    }
)


class RichBackend:
    """ConsoleProtocol implementation backed by Rich."""

    def __init__(self, console: Console | None = None) -> None:
        self._con = console or Console(theme=_THEME, highlight=False)
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        self._con.print(f"  {message}", style="info")

    def success(self, message: str) -> None:
        self._con.print(f"  ✓ {message}", style="success")

    def warning(self, message: str) -> None:
        self._con.print(f"  ⚠ {message}", style="warning")

    def error(self, message: str) -> None:
        self._con.print(f"  ✗ {message}", style="error")

    # -- Key-value summaries ------------------------------------------------

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        t = Table(
            title=title or None,
            box=box.SIMPLE,
            show_header=False,
            show_edge=False,
            pad_edge=True,
        )
        t.add_column("Key", style="bold", justify="right")
        t.add_column("Value")
        for k, v in data.items():
            t.add_row(k, v)
        self._con.print(t)

    # -- Run lifecycle ------------------------------------------------------

    def progress(self, fraction: float, label: str) -> None:
        if self._progress is None:
            self._progress = Progress(
                TextColumn("  [progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                console=self._con,
                transient=True,
            )
            self._progress.start()
            self._task = self._progress.add_task(label, total=1.0)
        assert self._task is not None
        self._progress.update(
            self._task,
            completed=min(max(fraction, 0.0), 1.0),
            description=label,
        )

    def progress_end(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None

    def result(self, result: BenchmarkResult) -> None:
        rows = result_rows(result)
        rows["Score"] = f"[score]{rows['Score']}[/]"
        self.kv(rows, title="Result")

    def comparison(self, comparison: Comparison) -> None:
        self.kv(comparison_rows(comparison), title="Single vs multi-thread")
