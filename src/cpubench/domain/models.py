"""Core data models for cpubench."""

from dataclasses import dataclass
from enum import Enum

from cpubench.config import (
    FIBONACCI_N,
    MATRIX_SIZE,
    MONTE_CARLO_ITERATIONS,
    PRIME_LIMIT,
)


class ThreadMode(Enum):
    """How a benchmark run was executed."""

    SINGLE_THREAD = "single_thread"
    MULTI_THREAD = "multi_thread"


@dataclass(frozen=True)
class WorkloadParams:
    """Parameters of one work unit (one pass through all four workloads)."""

    fibonacci_n: int = FIBONACCI_N
    matrix_size: int = MATRIX_SIZE
    monte_carlo_iterations: int = MONTE_CARLO_ITERATIONS
    prime_limit: int = PRIME_LIMIT


@dataclass(frozen=True)
class BenchmarkResult:
    """Outcome of one completed run. A higher score means a faster CPU."""

    score: int
    time_taken_ms: int
    mode: ThreadMode
    workers_used: int

    def __post_init__(self) -> None:
        if self.score < 0:
            raise ValueError(f"score must be >= 0, got {self.score}")
        if self.time_taken_ms < 0:
            raise ValueError(f"time_taken_ms must be >= 0, got {self.time_taken_ms}")
        if self.workers_used < 1:
            raise ValueError(f"workers_used must be >= 1, got {self.workers_used}")


@dataclass(frozen=True)
class Comparison:
    """Single- versus multi-threaded figures derived from two results."""

    time_ratio: float
    speedup: float
    theoretical: float
    efficiency_percent: float
    workers_used: int


# ---------------------------------------------------------------------------
# Run state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    """No run is active."""


@dataclass(frozen=True)
class Running:
    """A run is in flight."""

    progress: float = 0.0
    active_workers: int = 0


@dataclass(frozen=True)
class Completed:
    """The last run finished normally."""

    result: BenchmarkResult


@dataclass(frozen=True)
class Failed:
    """The last run stopped on an unrecoverable error."""

    reason: str


RunState = Idle | Running | Completed | Failed
