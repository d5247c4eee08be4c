"""How a run's work units are split across workers."""

from dataclasses import dataclass

from cpubench.engine.errors import InvalidWorkerCountError


@dataclass(frozen=True)
class Partition:
    """Units assigned to each worker and how their progress is normalised.

    When ``worker_count`` exceeds ``total_units`` the fallback policy applies:
    every worker still gets ``total_units // worker_count`` (zero) units and
    progress is measured against ``total_units``. Otherwise each worker gets
    ``total_units // worker_count`` units and the remainder is not run.
    """

    total_units: int
    worker_count: int
    units_per_worker: int
    uses_fallback: bool

    @property
    def progress_denominator(self) -> int:
        if self.uses_fallback:
            return self.total_units
        return self.worker_count * self.units_per_worker

    @property
    def executed_units(self) -> int:
        return self.worker_count * self.units_per_worker

    @property
    def dropped_units(self) -> int:
        return self.total_units - self.executed_units

    def progress(self, worker_id: int, step: int) -> float:
        """Progress fraction reported by *worker_id* after its local *step*."""
        done = worker_id * self.units_per_worker + step + 1
        return done / self.progress_denominator


def plan_partition(total_units: int, worker_count: int) -> Partition:
    """Split *total_units* across *worker_count* workers."""
    if worker_count < 1:
        raise InvalidWorkerCountError(f"worker_count must be >= 1, got {worker_count}")
    if total_units < 1:
        raise InvalidWorkerCountError(f"total_units must be >= 1, got {total_units}")

    per_worker = total_units // worker_count
    if per_worker == 0:
        # Fallback: recomputed the same way, so every worker gets zero units.
        return Partition(
            total_units=total_units,
            worker_count=worker_count,
            units_per_worker=total_units // worker_count,
            uses_fallback=True,
        )
    return Partition(
        total_units=total_units,
        worker_count=worker_count,
        units_per_worker=per_worker,
        uses_fallback=False,
    )
