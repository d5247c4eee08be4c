"""Protocol interfaces for cpubench components."""

from __future__ import annotations

from typing import Protocol

from cpubench.domain.models import RunState


class SingleThreadProgress(Protocol):
    """Progress callback for a single-threaded run."""

    def __call__(self, progress: float) -> None: ...


class MultiThreadProgress(Protocol):
    """Progress callback for a multi-threaded run.

    Called from worker threads, possibly from several at once.
    """

    def __call__(self, progress: float, worker_id: int) -> None: ...


class SessionListener(Protocol):
    """Callback interface for front ends observing a BenchmarkSession."""

    def on_state_change(self, state: RunState) -> None:
        """Called on the event loop thread after every state transition."""
        ...
