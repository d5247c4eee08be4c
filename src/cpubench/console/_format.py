"""Text shared by the console backends and the TUI."""

from __future__ import annotations

from cpubench.domain.models import BenchmarkResult, Comparison, ThreadMode

MODE_LABELS: dict[ThreadMode, str] = {
    ThreadMode.SINGLE_THREAD: "Single-thread",
    ThreadMode.MULTI_THREAD: "Multi-thread",
}


def result_rows(result: BenchmarkResult) -> dict[str, str]:
    return {
        "Mode": MODE_LABELS[result.mode],
        "Score": f"{result.score:,}",
        "Time": f"{result.time_taken_ms:,} ms",
        "Workers": str(result.workers_used),
    }


def comparison_rows(comparison: Comparison) -> dict[str, str]:
    return {
        "Speedup": f"{comparison.speedup:.2f}x",
        "Time ratio (multi/single)": f"{comparison.time_ratio:.2f}",
        "Theoretical speedup": f"{comparison.theoretical:.2f}x",
        "Parallel efficiency": f"{comparison.efficiency_percent:.1f}%",
        "Workers used": str(comparison.workers_used),
    }
