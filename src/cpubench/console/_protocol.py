"""cpubench.console._protocol -- ConsoleProtocol definition.

Pure standard-library typing.Protocol for the cpubench terminal output.
Nothing outside the standard library and cpubench.domain may be imported here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from cpubench.domain.models import BenchmarkResult, Comparison


class ConsoleProtocol(Protocol):
    """cpubench terminal output protocol.

    **General messages**::

        console.info("Using 8 workers")
        console.success("Benchmark finished")
        console.warning("2 units not run")
        console.error("Benchmark failed")

    **Key-value summaries**::

        console.kv({"Device": "Linux x86_64", "CPU cores": "8"})

    **Run lifecycle** -- used by cli.py while a run is in flight::

        console.progress(0.25, "multi-thread, worker 3")
        console.progress_end()
        console.result(result)
        console.comparison(comparison)
    """

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        """Informational message."""
        ...

    def success(self, message: str) -> None:
        """Success / positive-outcome message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message."""
        ...

    # -- Key-value summaries ------------------------------------------------

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        """Display key-value pairs."""
        ...

    # -- Run lifecycle ------------------------------------------------------

    def progress(self, fraction: float, label: str) -> None:
        """Show or update the progress bar of the active run."""
        ...

    def progress_end(self) -> None:
        """Remove the progress bar (run finished, failed or was cancelled)."""
        ...

    def result(self, result: BenchmarkResult) -> None:
        """Display a completed run's score and time."""
        ...

    def comparison(self, comparison: Comparison) -> None:
        """Display single- versus multi-threaded figures."""
        ...
