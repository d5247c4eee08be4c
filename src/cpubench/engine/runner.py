"""Benchmark runner: drives work units on one thread or across N workers."""

from __future__ import annotations

import asyncio
import logging
import random
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

from cpubench.config import TOTAL_UNITS
from cpubench.domain.models import BenchmarkResult, ThreadMode, WorkloadParams
from cpubench.domain.protocols import MultiThreadProgress, SingleThreadProgress
from cpubench.engine.errors import BenchmarkExecutionError, InvalidWorkerCountError
from cpubench.engine.partition import plan_partition
from cpubench.engine.scoring import calculate_score
from cpubench.engine.workloads import run_work_unit

logger = logging.getLogger(__name__)

WORKER_THREAD_PREFIX = "cpubench-worker"


def _elapsed_ms(start_ns: int) -> int:
    return max(0, (time.perf_counter_ns() - start_ns) // 1_000_000)


class BenchmarkEngine:
    """Stateless benchmark service.

    Holds only the immutable workload parameters, so one instance can be
    shared by any number of callers and concurrent runs.
    """

    def __init__(self, params: WorkloadParams | None = None) -> None:
        self._params = params or WorkloadParams()

    @property
    def params(self) -> WorkloadParams:
        return self._params

    async def run_single_thread(
        self,
        on_progress: SingleThreadProgress | None = None,
        *,
        total_units: int = TOTAL_UNITS,
    ) -> BenchmarkResult:
        """Run every work unit in sequence on one dedicated thread.

        ``on_progress`` receives ``(i + 1) / total_units`` after each unit and
        is called from the worker thread.
        """
        if total_units < 1:
            raise InvalidWorkerCountError(f"total_units must be >= 1, got {total_units}")

        def report(worker_id: int, step: int) -> None:
            if on_progress is not None:
                on_progress((step + 1) / total_units)

        logger.info("Single-thread run started: %d units", total_units)
        stop = threading.Event()
        start_ns = time.perf_counter_ns()
        await self._fan_out([(0, total_units)], report, stop)
        time_taken_ms = _elapsed_ms(start_ns)

        result = BenchmarkResult(
            score=calculate_score(time_taken_ms),
            time_taken_ms=time_taken_ms,
            mode=ThreadMode.SINGLE_THREAD,
            workers_used=1,
        )
        logger.info(
            "Single-thread run finished in %d ms (score %d)",
            result.time_taken_ms,
            result.score,
        )
        return result

    async def run_multi_thread(
        self,
        worker_count: int,
        on_progress: MultiThreadProgress | None = None,
        *,
        total_units: int = TOTAL_UNITS,
    ) -> BenchmarkResult:
        """Split the work units across ``worker_count`` parallel workers.

        ``on_progress(progress, worker_id)`` is called from the worker threads
        and may be invoked by several of them at once. The timer covers
        dispatch through the completion of the last worker.
        """
        partition = plan_partition(total_units, worker_count)

        def report(worker_id: int, step: int) -> None:
            if on_progress is not None:
                on_progress(partition.progress(worker_id, step), worker_id)

        logger.info(
            "Multi-thread run started: %d workers x %d units (%d dropped%s)",
            worker_count,
            partition.units_per_worker,
            partition.dropped_units,
            ", fallback partition" if partition.uses_fallback else "",
        )
        stop = threading.Event()
        start_ns = time.perf_counter_ns()
        await self._fan_out(
            [(w, partition.units_per_worker) for w in range(worker_count)],
            report,
            stop,
        )
        time_taken_ms = _elapsed_ms(start_ns)

        result = BenchmarkResult(
            score=calculate_score(time_taken_ms),
            time_taken_ms=time_taken_ms,
            mode=ThreadMode.MULTI_THREAD,
            workers_used=worker_count,
        )
        logger.info(
            "Multi-thread run finished in %d ms with %d workers (score %d)",
            result.time_taken_ms,
            worker_count,
            result.score,
        )
        return result

    # -- internals ---------------------------------------------------------

    async def _fan_out(
        self,
        assignments: list[tuple[int, int]],
        report: Callable[[int, int], None],
        stop: threading.Event,
    ) -> None:
        """Run one worker thread per ``(worker_id, units)`` and join them all.

        If the awaiting task is cancelled, ``stop`` is set so no worker starts
        another unit, and the pool is released without waiting.
        """
        loop = asyncio.get_running_loop()
        executor = ThreadPoolExecutor(
            max_workers=len(assignments),
            thread_name_prefix=WORKER_THREAD_PREFIX,
        )
        try:
            futures = [
                loop.run_in_executor(
                    executor, self._work, worker_id, units, report, stop
                )
                for worker_id, units in assignments
            ]
            outcomes = await asyncio.gather(*futures, return_exceptions=True)
        except asyncio.CancelledError:
            stop.set()
            logger.info("Run cancelled; workers stop after their current unit")
            raise
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            cause = failures[0]
            reason = str(cause) or type(cause).__name__
            logger.error("Run failed in %d worker(s): %s", len(failures), reason)
            raise BenchmarkExecutionError(reason) from cause

    def _work(
        self,
        worker_id: int,
        units: int,
        report: Callable[[int, int], None],
        stop: threading.Event,
    ) -> None:
        """Body of one worker thread."""
        rng = random.Random()
        try:
            for step in range(units):
                if stop.is_set():
                    logger.debug("Worker %d stopping before unit %d", worker_id, step)
                    return
                run_work_unit(self._params, rng)
                try:
                    report(worker_id, step)
                except Exception:
                    logger.exception("Progress callback raised; ignoring")
        except Exception:
            # Tell the sibling workers to wind down; the caller reports the failure.
            stop.set()
            raise
