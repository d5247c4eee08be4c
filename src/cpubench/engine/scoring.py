"""Score and speedup arithmetic."""

from cpubench.domain.models import BenchmarkResult, Comparison

# Calibration constants: 1000 ms maps to a score of 100_000.
_SCORE_NUMERATOR = 1_000_000
_SCORE_SCALE = 100


def calculate_score(time_taken_ms: int) -> int:
    """Convert elapsed milliseconds into a score. Faster runs score higher."""
    if time_taken_ms <= 0:
        return 0
    return (_SCORE_NUMERATOR // time_taken_ms) * _SCORE_SCALE


def theoretical_speedup(worker_count: int) -> float:
    """Ideal speedup with no serial fraction: one per worker."""
    return float(worker_count)


def actual_speedup(single: BenchmarkResult, multi: BenchmarkResult) -> float:
    """Return the time ratio ``multi / single``.

    Below 1.0 means the multi-threaded run finished faster.
    """
    if single.time_taken_ms <= 0:
        return 0.0
    return multi.time_taken_ms / single.time_taken_ms


def compare(single: BenchmarkResult, multi: BenchmarkResult) -> Comparison:
    """Derive the figures shown when both results are available."""
    speedup = (
        single.time_taken_ms / multi.time_taken_ms if multi.time_taken_ms > 0 else 0.0
    )
    efficiency = speedup / multi.workers_used * 100
    return Comparison(
        time_ratio=actual_speedup(single, multi),
        speedup=speedup,
        theoretical=theoretical_speedup(multi.workers_used),
        efficiency_percent=min(max(efficiency, 0.0), 100.0),
        workers_used=multi.workers_used,
    )
