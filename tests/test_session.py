"""Tests for the benchmark session state machine."""

import asyncio

import pytest
from conftest import RecordingListener, UnitCounter

from cpubench.domain.models import Completed, Failed, Idle, Running, ThreadMode, WorkloadParams
from cpubench.engine.errors import InvalidWorkerCountError
from cpubench.engine.runner import BenchmarkEngine
from cpubench.session.controller import BenchmarkSession

RUN_WORK_UNIT = "cpubench.engine.runner.run_work_unit"


@pytest.fixture
def session(engine: BenchmarkEngine, listener: RecordingListener) -> BenchmarkSession:
    return BenchmarkSession(engine, 2, listener, total_units=6)


async def _wait_for_running_progress(session: BenchmarkSession) -> None:
    for _ in range(200):
        state = session.state
        if isinstance(state, Running) and state.progress > 0:
            return
        await asyncio.sleep(0.01)
    raise AssertionError("run never reported progress")


class TestLifecycle:
    def test_starts_idle(self, session: BenchmarkSession) -> None:
        assert session.state == Idle()
        assert session.is_idle
        assert not session.is_running
        assert not session.has_results
        assert session.comparison() is None

    async def test_single_run_completes(
        self, session: BenchmarkSession, listener: RecordingListener
    ) -> None:
        session.start_single()
        assert session.is_running
        await session.wait()

        state = session.state
        assert isinstance(state, Completed)
        assert state.result.mode == ThreadMode.SINGLE_THREAD
        assert session.single_result is state.result
        assert session.multi_result is None
        assert listener.states[0] == Running(0.0, 0)
        assert len(listener.of_type(Completed)) == 1
        assert listener.of_type(Failed) == []

    async def test_progress_is_non_decreasing_and_reaches_one(
        self, session: BenchmarkSession, listener: RecordingListener
    ) -> None:
        session.start_single()
        await session.wait()
        progress = [s.progress for s in listener.of_type(Running)]
        assert progress == sorted(progress)
        assert progress[-1] == 1.0
        assert all(s.active_workers == 1 for s in listener.of_type(Running)[1:])

    async def test_multi_run_uses_session_workers(
        self, session: BenchmarkSession, listener: RecordingListener
    ) -> None:
        session.start_multi()
        await session.wait()
        state = session.state
        assert isinstance(state, Completed)
        assert state.result.workers_used == 2
        assert session.multi_result is state.result
        progress = [s.progress for s in listener.of_type(Running)]
        assert progress == sorted(progress)

    async def test_multi_run_with_explicit_workers(self, session: BenchmarkSession) -> None:
        session.start_multi(3)
        await session.wait()
        assert session.multi_result is not None
        assert session.multi_result.workers_used == 3

    async def test_comparison_after_both_runs(self, session: BenchmarkSession) -> None:
        session.start_single()
        await session.wait()
        session.start_multi()
        await session.wait()
        assert session.show_comparison
        comparison = session.comparison()
        assert comparison is not None
        assert comparison.workers_used == 2
        assert comparison.theoretical == 2.0


class TestFailure:
    async def test_execution_error_becomes_failed(
        self,
        session: BenchmarkSession,
        listener: RecordingListener,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def explode(params: WorkloadParams, rng: object = None) -> None:
            raise OSError("resource exhausted")

        monkeypatch.setattr(RUN_WORK_UNIT, explode)
        session.start_multi()
        await session.wait()

        assert session.state == Failed("resource exhausted")
        assert listener.of_type(Completed) == []
        assert len(listener.of_type(Failed)) == 1
        assert session.multi_result is None

    async def test_invalid_worker_count_raises_immediately(
        self, session: BenchmarkSession, listener: RecordingListener
    ) -> None:
        with pytest.raises(InvalidWorkerCountError):
            session.start_multi(0)
        assert session.state == Idle()
        assert listener.states == []

    async def test_reset_after_failure(
        self, session: BenchmarkSession, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def explode(params: WorkloadParams, rng: object = None) -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr(RUN_WORK_UNIT, explode)
        session.start_single()
        await session.wait()
        assert isinstance(session.state, Failed)
        session.reset()
        assert session.state == Idle()


class TestCancellation:
    async def test_stop_returns_to_idle_without_completing(
        self,
        session: BenchmarkSession,
        listener: RecordingListener,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(RUN_WORK_UNIT, UnitCounter(delay=0.02))
        big = BenchmarkSession(session._engine, 2, listener, total_units=100)
        big.start_multi()
        await _wait_for_running_progress(big)

        big.stop()
        assert big.state == Idle()
        await asyncio.sleep(0.2)

        assert big.state == Idle()
        assert listener.of_type(Completed) == []
        assert listener.states[-1] == Idle()
        assert big.multi_result is None

    async def test_new_run_discards_late_updates_of_the_old_one(
        self, listener: RecordingListener, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(RUN_WORK_UNIT, UnitCounter(delay=0.02))
        session = BenchmarkSession(
            BenchmarkEngine(WorkloadParams()), 2, listener, total_units=40
        )
        first = session.start_multi()
        await _wait_for_running_progress(session)

        second = session.start_single()
        assert first is not second
        # The replacement run starts from zero.
        assert session.state == Running(0.0, 0)
        await session.wait()

        assert first.cancelled()
        completed = listener.of_type(Completed)
        assert len(completed) == 1
        assert completed[0].result.mode == ThreadMode.SINGLE_THREAD
        assert session.multi_result is None

        # After the restart: the initial state, one update per single-thread
        # unit, then completion. Late multi-thread updates never show up.
        restart = listener.states.index(Running(0.0, 0), 1)
        after = listener.states[restart:]
        assert len(after) == 1 + 40 + 1
        assert [s.progress for s in after[1:-1]] == [(i + 1) / 40 for i in range(40)]

    async def test_cancelling_the_returned_task_returns_to_idle(
        self, engine: BenchmarkEngine, listener: RecordingListener, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(RUN_WORK_UNIT, UnitCounter(delay=0.02))
        session = BenchmarkSession(engine, 2, listener, total_units=100)
        task = session.start_single()
        await _wait_for_running_progress(session)

        task.cancel()
        await session.wait()
        assert session.state == Idle()
        assert not session.is_running

        await asyncio.sleep(0.1)
        assert session.state == Idle()
        assert listener.states[-1] == Idle()
        assert listener.of_type(Completed) == []
        assert session.single_result is None

    async def test_cancelling_before_the_task_runs_returns_to_idle(
        self, session: BenchmarkSession, listener: RecordingListener
    ) -> None:
        task = session.start_multi()
        task.cancel()
        await session.wait()
        assert session.state == Idle()
        assert listener.states == [Running(0.0, 0), Idle()]

    async def test_new_run_after_direct_cancel(self, session: BenchmarkSession) -> None:
        session.start_single().cancel()
        await session.wait()
        session.start_single()
        await session.wait()
        assert isinstance(session.state, Completed)

    async def test_reset_clears_results(self, session: BenchmarkSession) -> None:
        session.start_single()
        await session.wait()
        assert session.has_results
        session.reset()
        assert not session.has_results
        assert session.state == Idle()

    async def test_close_detaches_listener(
        self,
        session: BenchmarkSession,
        listener: RecordingListener,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(RUN_WORK_UNIT, UnitCounter(delay=0.02))
        session.start_single()
        count = len(listener.states)
        session.close()
        await asyncio.sleep(0.1)
        assert len(listener.states) == count
        assert session.state == Idle()

    async def test_wait_without_run(self, session: BenchmarkSession) -> None:
        await session.wait()
        assert session.state == Idle()
