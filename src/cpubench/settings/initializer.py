"""Initialize the .cpubench/ directory structure."""

from pathlib import Path

from cpubench.config import (
    FIBONACCI_N,
    MATRIX_SIZE,
    MONTE_CARLO_ITERATIONS,
    PRIME_LIMIT,
    TOTAL_UNITS,
    config_file,
    cpubench_dir,
    logs_dir,
)

_DEFAULT_CONFIG = f"""\
# cpubench configuration
# workers: 8            # defaults to the number of available cores
total_units: {TOTAL_UNITS}
workload:
  fibonacci_n: {FIBONACCI_N}
  matrix_size: {MATRIX_SIZE}
  monte_carlo_iterations: {MONTE_CARLO_ITERATIONS}
  prime_limit: {PRIME_LIMIT}
log_level: INFO
console: auto
"""

_GITIGNORE = """\
logs/
"""


def is_initialized(project_root: Path) -> bool:
    """Check if .cpubench/ directory exists."""
    return cpubench_dir(project_root).is_dir()


def initialize(project_root: Path) -> Path:
    """Initialize .cpubench/ directory structure.

    Returns the path to the .cpubench directory.
    """
    root = cpubench_dir(project_root)
    root.mkdir(exist_ok=True)
    logs_dir(project_root).mkdir(exist_ok=True)

    cf = config_file(project_root)
    if not cf.exists():
        cf.write_text(_DEFAULT_CONFIG)

    gitignore = root / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text(_GITIGNORE)

    return root
