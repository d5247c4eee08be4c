"""Benchmark exceptions."""


class BenchmarkError(Exception):
    """Base class for benchmark failures."""


class InvalidWorkerCountError(BenchmarkError, ValueError):
    """Raised before a run starts when its parameters are out of range."""


class BenchmarkExecutionError(BenchmarkError):
    """Raised when a workload fails inside a worker.

    The original exception is chained as ``__cause__``.
    """
