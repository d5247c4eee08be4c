"""cpubench TUI application."""

import logging
from collections.abc import Iterator
from pathlib import Path

from textual import events
from textual.app import App
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Input, OptionList
from textual.widgets.option_list import Option

from cpubench.device import DeviceInfo
from cpubench.domain.models import Completed, Failed, Idle, Running, RunState
from cpubench.engine.errors import InvalidWorkerCountError
from cpubench.engine.runner import BenchmarkEngine
from cpubench.session.controller import BenchmarkSession
from cpubench.settings.loader import BenchmarkConfig
from cpubench.tui.widgets import DevicePanel, MessageLog, ResultsPanel, RunPanel, StatusBar

logger = logging.getLogger(__name__)

_COMMANDS: dict[str, str] = {
    "/single": "Run single-thread benchmark",
    "/multi": "Run multi-thread benchmark",
    "/stop": "Cancel the running benchmark",
    "/reset": "Clear all results",
    "/help": "Show available commands",
    "/quit": "Exit cpubench",
}


class CommandInput(Input):
    """Input that intercepts Tab/Up/Down for command completion."""

    class TabPressed(Message):
        """Posted when user presses Tab."""

    class ArrowPressed(Message):
        """Posted when user presses Up/Down while cmd list is open."""

        def __init__(self, direction: int) -> None:
            super().__init__()
            self.direction = direction  # -1 = up, +1 = down

    class EscapePressed(Message):
        """Posted when user presses Escape."""

    async def _on_key(self, event: events.Key) -> None:
        if event.key == "tab":
            event.prevent_default()
            event.stop()
            self.post_message(self.TabPressed())
            return
        if event.key in ("up", "down"):
            event.prevent_default()
            event.stop()
            self.post_message(self.ArrowPressed(-1 if event.key == "up" else 1))
            return
        if event.key == "escape":
            event.prevent_default()
            event.stop()
            self.post_message(self.EscapePressed())
            return
        await super()._on_key(event)


class CpuBenchApp(App[None]):
    """Main cpubench TUI application."""

    TITLE = "cpubench"

    CSS = """
    #main-content {
        height: auto;
    }
    #left-column, #right-column {
        width: 1fr;
        height: auto;
    }
    #cmd-list {
        height: auto;
        max-height: 8;
    }
    """

    BINDINGS = [  # type: ignore[assignment]  # noqa: RUF012
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        project_dir: Path | None = None,
        config: BenchmarkConfig | None = None,
        workers: int | None = None,
        device: DeviceInfo | None = None,
    ) -> None:
        super().__init__()
        self._project_dir = project_dir or Path.cwd()
        self._config = config or BenchmarkConfig()
        self._device = device or DeviceInfo.detect()
        if workers is None:
            workers = self._config.workers or self._device.cores
        if workers < 1:
            raise InvalidWorkerCountError(f"worker_count must be >= 1, got {workers}")
        self._workers = workers
        self._engine = BenchmarkEngine(self._config.workload)
        self.session: BenchmarkSession | None = None

        self._status_bar = StatusBar()
        self.device_panel = DevicePanel()
        self.run_panel = RunPanel()
        self.results_panel = ResultsPanel()
        self.messages = MessageLog()
        self._input = CommandInput(
            placeholder="Type / for commands",
            id="input-bar",
        )
        self._cmd_list = OptionList(
            *[Option(f"{cmd}  {desc}", id=cmd) for cmd, desc in _COMMANDS.items()],
            id="cmd-list",
        )
        self._cmd_list.can_focus = False
        self._suppress_cmd_list = False

    def compose(self) -> Iterator[Widget]:
        """Create child widgets."""
        yield self._status_bar
        with Horizontal(id="main-content"):
            with Vertical(id="left-column"):
                yield self.device_panel
                yield self.run_panel
            with Vertical(id="right-column"):
                yield self.results_panel
        yield self.messages
        yield self._cmd_list
        yield self._input

    def on_mount(self) -> None:
        """Create the session and show device details."""
        self._cmd_list.display = False
        self.session = BenchmarkSession(
            self._engine,
            self._workers,
            _SessionListenerImpl(self),
            total_units=self._config.total_units,
        )
        info = self._device.describe()
        info["Workers"] = str(self._workers)
        info["Work units"] = str(self._config.total_units)
        self.device_panel.show(info)
        self._set_status("Ready")
        self.messages.append_status("Welcome to cpubench. Type /help for available commands.")
        self._input.focus()

    def on_unmount(self) -> None:
        if self.session is not None:
            self.session.close()

    # ── input handling ───────────────────────────────────

    def on_input_changed(self, event: Input.Changed) -> None:
        """Show/hide command list as user types."""
        if self._suppress_cmd_list:
            self._suppress_cmd_list = False
            return
        val = event.value
        if val.startswith("/") and " " not in val:
            prefix = val.lower()
            matches = [(c, d) for c, d in _COMMANDS.items() if c.startswith(prefix)]
            if matches:
                self._show_cmd_options(matches)
                return
        self._cmd_list.display = False

    def _show_cmd_options(self, items: list[tuple[str, str]]) -> None:
        """Populate the command list and highlight the first item."""
        self._cmd_list.clear_options()
        self._cmd_list.add_options([Option(f"{c}  {d}", id=c) for c, d in items])
        self._cmd_list.highlighted = 0
        self._cmd_list.display = True

    def on_command_input_arrow_pressed(self, event: CommandInput.ArrowPressed) -> None:
        """Move highlight in command list."""
        if not self._cmd_list.display:
            return
        idx = self._cmd_list.highlighted
        idx = 0 if idx is None else idx + event.direction
        self._cmd_list.highlighted = max(0, min(idx, self._cmd_list.option_count - 1))

    def on_command_input_tab_pressed(self) -> None:
        """Tab-complete: fill input with highlighted command."""
        cmd = self._get_highlighted_cmd()
        if cmd is None:
            return
        self._suppress_cmd_list = True
        self._input.value = cmd
        self._input.action_end()
        self._cmd_list.display = False

    def on_command_input_escape_pressed(self) -> None:
        """Hide command list on Escape."""
        self._cmd_list.display = False

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        """Execute the clicked command."""
        cmd = event.option.id
        if cmd is None:
            return
        self._cmd_list.display = False
        self._input.value = ""
        self._input.focus()
        self.handle_command(cmd)

    def _get_highlighted_cmd(self) -> str | None:
        """Return the highlighted command ID, or None."""
        if not self._cmd_list.display:
            return None
        idx = self._cmd_list.highlighted
        if idx is None:
            return None
        return self._cmd_list.get_option_at_index(idx).id

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Run the typed (or highlighted) slash command."""
        text = event.value.strip()
        highlighted = self._get_highlighted_cmd()
        self._cmd_list.display = False
        self._input.value = ""
        if highlighted is not None and " " not in text:
            text = highlighted
        if not text:
            return
        if text.startswith("/"):
            self.handle_command(text)
        else:
            self.messages.append_status(f"Unknown input: {text}. Use /help for commands.")

    # ── commands ─────────────────────────────────────────

    def handle_command(self, cmd: str) -> None:
        """Dispatch slash commands."""
        parts = cmd.split(maxsplit=1)
        command = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if command == "/help":
            self._cmd_help()
        elif command == "/single":
            self._cmd_single()
        elif command == "/multi":
            self._cmd_multi(arg)
        elif command == "/stop":
            self._cmd_stop()
        elif command == "/reset":
            self._cmd_reset()
        elif command in ("/quit", "/q"):
            self.exit()
        else:
            self.messages.append_status(f"Unknown command: {command}. Type /help.")

    def _cmd_help(self) -> None:
        """Show available commands."""
        self.messages.append_status("/single             Run the single-thread benchmark")
        self.messages.append_status(
            f"/multi [workers]    Run the multi-thread benchmark (default {self._workers})"
        )
        self.messages.append_status("/stop               Cancel the running benchmark")
        self.messages.append_status("/reset              Clear all results")
        self.messages.append_status("/quit               Exit cpubench")

    def _cmd_single(self) -> None:
        assert self.session is not None
        if self.session.is_running:
            self.messages.append_status("Cancelling the running benchmark.")
        self.messages.append_status("Starting single-thread benchmark.")
        self.session.start_single()

    def _cmd_multi(self, arg: str) -> None:
        assert self.session is not None
        workers: int | None = None
        if arg:
            try:
                workers = int(arg)
            except ValueError:
                self.messages.append_status(f"Not a worker count: {arg}")
                return
        try:
            was_running = self.session.is_running
            self.session.start_multi(workers)
        except InvalidWorkerCountError as e:
            self.messages.append_status(str(e))
            return
        if was_running:
            self.messages.append_status("Cancelled the previous benchmark.")
        count = workers if workers is not None else self._workers
        self.messages.append_status(f"Starting multi-thread benchmark with {count} workers.")

    def _cmd_stop(self) -> None:
        assert self.session is not None
        if not self.session.is_running:
            self.messages.append_status("No benchmark is running.")
            return
        self.session.stop()
        self.messages.append_status("Benchmark cancelled.")

    def _cmd_reset(self) -> None:
        assert self.session is not None
        self.session.reset()
        self.messages.append_status("Results cleared.")

    # ── session updates ──────────────────────────────────

    def _set_status(self, text: str) -> None:
        self._status_bar.set_status(f"CPUBENCH | {self._device.model} | {text}")

    def show_state(self, state: RunState) -> None:
        """Called by the session listener on every transition."""
        assert self.session is not None
        self.run_panel.show_state(state)
        match state:
            case Idle():
                self._set_status("Ready")
            case Running():
                self._set_status("Running")
            case Completed(result=result):
                self._set_status(f"Completed: score {result.score:,}")
                self.messages.append_status(
                    f"Finished in {result.time_taken_ms:,} ms, score {result.score:,}."
                )
            case Failed(reason=reason):
                self._set_status("Error")
                self.messages.append_status(f"Error: {reason}")
        if not isinstance(state, Running):
            self.results_panel.show_results(
                self.session.single_result,
                self.session.multi_result,
                self.session.comparison(),
            )


class _SessionListenerImpl:
    """Bridges the SessionListener protocol to CpuBenchApp."""

    def __init__(self, app: CpuBenchApp) -> None:
        self._app = app

    def on_state_change(self, state: RunState) -> None:
        logger.debug("State change: %s", state)
        self._app.show_state(state)
