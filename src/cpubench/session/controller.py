"""Benchmark session: owns the run state for one front end."""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from cpubench.config import TOTAL_UNITS
from cpubench.domain.models import (
    BenchmarkResult,
    Comparison,
    Completed,
    Failed,
    Idle,
    Running,
    RunState,
    ThreadMode,
)
from cpubench.domain.protocols import SessionListener
from cpubench.engine.errors import InvalidWorkerCountError
from cpubench.engine.runner import BenchmarkEngine
from cpubench.engine.scoring import compare

logger = logging.getLogger(__name__)

_Report = Callable[[float, int], None]
_RunFactory = Callable[[_Report], Coroutine[Any, Any, BenchmarkResult]]


class BenchmarkSession:
    """Starts, stops and observes benchmark runs, at most one at a time.

    Must be used from a running asyncio event loop. Progress reported by
    worker threads is handed to the loop with ``call_soon_threadsafe``, so
    workers never wait on the session or its listener. Every run gets a
    generation number and anything arriving for an older generation is
    dropped.
    """

    def __init__(
        self,
        engine: BenchmarkEngine,
        worker_count: int,
        listener: SessionListener | None = None,
        *,
        total_units: int = TOTAL_UNITS,
    ) -> None:
        self._engine = engine
        self._worker_count = worker_count
        self._listener = listener
        self._total_units = total_units
        self._state: RunState = Idle()
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self.single_result: BenchmarkResult | None = None
        self.multi_result: BenchmarkResult | None = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def worker_count(self) -> int:
        return self._worker_count

    @property
    def is_running(self) -> bool:
        return isinstance(self._state, Running)

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, Idle)

    @property
    def has_results(self) -> bool:
        return self.single_result is not None or self.multi_result is not None

    @property
    def show_comparison(self) -> bool:
        return self.single_result is not None and self.multi_result is not None

    def comparison(self) -> Comparison | None:
        """Return single- vs multi-threaded figures once both results exist."""
        if self.single_result is None or self.multi_result is None:
            return None
        return compare(self.single_result, self.multi_result)

    # -- commands ----------------------------------------------------------

    def start_single(self) -> asyncio.Task[None]:
        """Cancel any active run and start a single-threaded one."""
        return self._start(
            lambda report: self._engine.run_single_thread(
                lambda progress: report(progress, 1),
                total_units=self._total_units,
            )
        )

    def start_multi(self, worker_count: int | None = None) -> asyncio.Task[None]:
        """Cancel any active run and start a multi-threaded one.

        Raises InvalidWorkerCountError without touching the current run when
        ``worker_count`` is below one.
        """
        workers = self._worker_count if worker_count is None else worker_count
        if workers < 1:
            raise InvalidWorkerCountError(f"worker_count must be >= 1, got {workers}")
        return self._start(
            lambda report: self._engine.run_multi_thread(
                workers,
                report,
                total_units=self._total_units,
            )
        )

    def stop(self) -> None:
        """Cancel the active run, if any, and return to Idle."""
        if self._task is not None and not self._task.done():
            logger.info("Cancelling run %d", self._generation)
            self._task.cancel()
        self._task = None
        self._generation += 1
        self._set_state(Idle())

    def reset(self) -> None:
        """Stop any run and forget stored results."""
        self.single_result = None
        self.multi_result = None
        self.stop()

    def close(self) -> None:
        """Cancel the active run and detach the listener without notifying it."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._generation += 1
        self._listener = None
        self._state = Idle()

    async def wait(self) -> None:
        """Wait until the active run finishes, fails or is cancelled."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    # -- internals ---------------------------------------------------------

    def _start(self, run_factory: _RunFactory) -> asyncio.Task[None]:
        """Cancel the active run, if any, and schedule a new one.

        The replaced run's workers may still be finishing their in-flight
        unit when the new run's timer starts, so its first units can share
        the CPU with them.
        """
        loop = asyncio.get_running_loop()
        if self._task is not None and not self._task.done():
            logger.info("Cancelling run %d before starting a new one", self._generation)
            self._task.cancel()

        self._generation += 1
        generation = self._generation
        self._set_state(Running(0.0, 0))

        def report(progress: float, active_workers: int) -> None:
            # Called on worker threads.
            try:
                loop.call_soon_threadsafe(
                    self._apply_progress, generation, progress, active_workers
                )
            except RuntimeError:
                logger.debug("Event loop closed; dropping progress for run %d", generation)

        task = loop.create_task(self._drive(generation, run_factory, report))
        task.add_done_callback(lambda t: self._on_done(generation, t))
        self._task = task
        return task

    def _on_done(self, generation: int, task: asyncio.Task[None]) -> None:
        # A task cancelled directly, not through stop(), still ends in Idle.
        if task.cancelled() and generation == self._generation:
            self._task = None
            self._generation += 1
            self._set_state(Idle())

    def _apply_progress(self, generation: int, progress: float, active_workers: int) -> None:
        current = self._state
        if generation != self._generation or not isinstance(current, Running):
            return
        self._set_state(Running(max(progress, current.progress), active_workers))

    async def _drive(
        self,
        generation: int,
        run_factory: _RunFactory,
        report: _Report,
    ) -> None:
        try:
            result = await run_factory(report)
        except asyncio.CancelledError:
            logger.info("Run %d cancelled", generation)
            raise
        except Exception as e:
            if generation != self._generation:
                return
            logger.error("Run %d failed: %s", generation, e)
            self._set_state(Failed(str(e) or "unknown error"))
            return

        if generation != self._generation:
            return
        if result.mode is ThreadMode.SINGLE_THREAD:
            self.single_result = result
        else:
            self.multi_result = result
        self._set_state(Completed(result))

    def _set_state(self, state: RunState) -> None:
        self._state = state
        if self._listener is not None:
            self._listener.on_state_change(state)
