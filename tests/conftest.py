"""Shared pytest fixtures for cpubench tests.

The engine fixtures use a tiny workload so runs take milliseconds; the
fixed benchmark parameters are only exercised by tests marked ``slow``.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import pytest

from cpubench.domain.models import (
    BenchmarkResult,
    RunState,
    ThreadMode,
    WorkloadParams,
)
from cpubench.engine.runner import BenchmarkEngine


class RecordingListener:
    """SessionListener that keeps every state it is given."""

    def __init__(self) -> None:
        self.states: list[RunState] = []

    def on_state_change(self, state: RunState) -> None:
        self.states.append(state)

    def of_type(self, kind: type) -> list[Any]:
        return [s for s in self.states if isinstance(s, kind)]


class UnitCounter:
    """Thread-safe stand-in for run_work_unit that counts calls per thread."""

    def __init__(self, delay: float = 0.0) -> None:
        self._lock = threading.Lock()
        self._delay = delay
        self.calls = 0
        self.threads: set[str] = set()

    def __call__(self, params: WorkloadParams, rng: object = None) -> None:
        if self._delay:
            threading.Event().wait(self._delay)
        with self._lock:
            self.calls += 1
            self.threads.add(threading.current_thread().name)


@pytest.fixture
def tiny_params() -> WorkloadParams:
    return WorkloadParams(
        fibonacci_n=30,
        matrix_size=3,
        monte_carlo_iterations=100,
        prime_limit=100,
    )


@pytest.fixture
def engine(tiny_params: WorkloadParams) -> BenchmarkEngine:
    return BenchmarkEngine(tiny_params)


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """An empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def make_result() -> Any:
    """Factory for BenchmarkResult with sensible defaults."""

    def _factory(
        *,
        time_taken_ms: int = 1000,
        mode: ThreadMode = ThreadMode.SINGLE_THREAD,
        workers_used: int = 1,
        score: int | None = None,
    ) -> BenchmarkResult:
        if score is None:
            score = (1_000_000 // time_taken_ms) * 100 if time_taken_ms > 0 else 0
        return BenchmarkResult(
            score=score,
            time_taken_ms=time_taken_ms,
            mode=mode,
            workers_used=workers_used,
        )

    return _factory
