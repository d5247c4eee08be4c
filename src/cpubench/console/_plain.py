"""cpubench.console._plain -- Plain-text fallback backend.

print()-based output with no external dependencies. Used when stdout is
not a TTY or when Rich is disabled in the configuration.
"""

from __future__ import annotations

import sys

from cpubench.console._format import comparison_rows, result_rows
from cpubench.domain.models import BenchmarkResult, Comparison

_BAR_WIDTH = 30


class PlainBackend:
    """ConsoleProtocol implementation using only built-in print()."""

    def __init__(self) -> None:
        self._progress_shown = False

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        print(f"  {message}")

    def success(self, message: str) -> None:
        print(f"  [ok] {message}")

    def warning(self, message: str) -> None:
        print(f"  [warn] {message}")

    def error(self, message: str) -> None:
        print(f"  [error] {message}")

    # -- Key-value summaries ------------------------------------------------

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        if title:
            print(f"\n  {title}:")
        if not data:
            return
        max_key = max(len(k) for k in data)
        for k, v in data.items():
            print(f"  {k.rjust(max_key)}: {v}")

    # -- Run lifecycle ------------------------------------------------------

    def progress(self, fraction: float, label: str) -> None:
        fraction = min(max(fraction, 0.0), 1.0)
        filled = round(fraction * _BAR_WIDTH)
        bar = "#" * filled + "-" * (_BAR_WIDTH - filled)
        sys.stdout.write(f"\r  [{bar}] {fraction * 100:5.1f}%  {label}")
        sys.stdout.flush()
        self._progress_shown = True

    def progress_end(self) -> None:
        if self._progress_shown:
            sys.stdout.write("\n")
            sys.stdout.flush()
            self._progress_shown = False

    def result(self, result: BenchmarkResult) -> None:
        self.kv(result_rows(result), title="Result")

    def comparison(self, comparison: Comparison) -> None:
        self.kv(comparison_rows(comparison), title="Comparison")
