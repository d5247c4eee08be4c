"""Custom widgets for the cpubench TUI."""

from __future__ import annotations

from rich.markup import escape as rich_escape
from rich.table import Table
from textual.containers import Vertical
from textual.widgets import ProgressBar, RichLog, Static

from cpubench.console._format import MODE_LABELS, comparison_rows, result_rows
from cpubench.domain.models import (
    BenchmarkResult,
    Comparison,
    Completed,
    Failed,
    Idle,
    Running,
    RunState,
)


def _escape(text: str) -> str:
    """Escape text so Rich markup characters are not interpreted."""
    return rich_escape(text)


class StatusBar(Static):
    """Top status bar showing current state."""

    DEFAULT_CSS = """
    StatusBar {
        dock: top;
        height: 1;
        background: $primary;
        color: $text;
        text-style: bold;
        padding: 0 1;
    }
    """

    def __init__(self) -> None:
        super().__init__("CPUBENCH | Ready")

    def set_status(self, text: str) -> None:
        """Update the status bar text."""
        self.update(text)


class DevicePanel(Static):
    """Key-value summary of the host and benchmark settings."""

    DEFAULT_CSS = """
    DevicePanel {
        height: auto;
        border: round $primary;
        padding: 0 1;
    }
    """

    def show(self, data: dict[str, str]) -> None:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold", justify="right")
        table.add_column()
        for key, value in data.items():
            table.add_row(key, value)
        self.update(table)


class RunPanel(Vertical):
    """Progress bar plus a one-line description of the run state."""

    DEFAULT_CSS = """
    RunPanel {
        height: auto;
        border: round $accent;
        padding: 0 1;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._bar = ProgressBar(total=100, show_eta=False, id="run-progress")
        self._label = Static("Idle", id="run-state")
        self._text = "Idle"

    def compose(self):  # type: ignore[override]
        yield self._label
        yield self._bar

    @property
    def state_text(self) -> str:
        return self._text

    def show_state(self, state: RunState) -> None:
        """Render *state*. Every RunState variant is handled."""
        match state:
            case Idle():
                self._bar.update(progress=0)
                self._text = "Idle"
            case Running(progress=progress, active_workers=workers):
                self._bar.update(progress=progress * 100)
                self._text = f"Running ({progress * 100:.0f}%, worker {workers})"
            case Completed(result=result):
                self._bar.update(progress=100)
                self._text = f"Completed: {MODE_LABELS[result.mode]} score {result.score:,}"
            case Failed(reason=reason):
                self._text = f"Failed: {reason}"
        style = "bold red" if isinstance(state, Failed) else "bold"
        self._label.update(f"[{style}]{_escape(self._text)}[/{style}]")


class ResultsPanel(Static):
    """Latest result per mode and, when both exist, the comparison."""

    DEFAULT_CSS = """
    ResultsPanel {
        height: auto;
        border: round $secondary;
        padding: 0 1;
    }
    """

    def __init__(self) -> None:
        super().__init__("No results yet.")

    def show_results(
        self,
        single: BenchmarkResult | None,
        multi: BenchmarkResult | None,
        comparison: Comparison | None,
    ) -> None:
        if single is None and multi is None:
            self.update("No results yet.")
            return

        table = Table(show_edge=False, expand=True)
        table.add_column("")
        for result in (single, multi):
            if result is not None:
                table.add_column(MODE_LABELS[result.mode])
        rows = [result_rows(r) for r in (single, multi) if r is not None]
        for key in ("Score", "Time", "Workers"):
            table.add_row(key, *[row[key] for row in rows])

        if comparison is None:
            self.update(table)
            return

        summary = Table.grid(padding=(0, 2))
        summary.add_column(style="bold", justify="right")
        summary.add_column()
        for key, value in comparison_rows(comparison).items():
            summary.add_row(key, value)
        outer = Table.grid()
        outer.add_row(table)
        outer.add_row("")
        outer.add_row(summary)
        self.update(outer)


class MessageLog(RichLog):
    """Scrolling log of commands and status messages."""

    def __init__(self) -> None:
        super().__init__(wrap=True, highlight=True, markup=True, id="messages")
        self.can_focus = False

    def append_status(self, text: str) -> None:
        """Append a status message."""
        self.write(f"  [yellow]{_escape(text)}[/yellow]")
