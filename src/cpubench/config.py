"""Benchmark constants and path helpers."""

from pathlib import Path

# One run always targets this many work units.
TOTAL_UNITS = 50

# Fixed workload parameters for one work unit
FIBONACCI_N = 10000
MATRIX_SIZE = 100
MONTE_CARLO_ITERATIONS = 50000
PRIME_LIMIT = 100000

# .cpubench/ directory structure
CPUBENCH_DIR = ".cpubench"
CONFIG_FILE = "config.yaml"
LOGS_DIR = "logs"
LOG_FILE = "cpubench.log"


def cpubench_dir(project_root: Path) -> Path:
    """Return the .cpubench directory path for a project."""
    return project_root / CPUBENCH_DIR


def config_file(project_root: Path) -> Path:
    """Return the config.yaml path."""
    return cpubench_dir(project_root) / CONFIG_FILE


def logs_dir(project_root: Path) -> Path:
    """Return the logs directory path."""
    return cpubench_dir(project_root) / LOGS_DIR


def log_file(project_root: Path) -> Path:
    """Return the cpubench.log path."""
    return logs_dir(project_root) / LOG_FILE
