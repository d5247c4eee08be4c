"""Configuration loading via YAML."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from cpubench.config import TOTAL_UNITS
from cpubench.domain.models import WorkloadParams

CONSOLE_BACKENDS = ("auto", "rich", "plain")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ConfigError(Exception):
    """Raised when the configuration file cannot be used."""


@dataclass(frozen=True)
class BenchmarkConfig:
    """Settings read by the CLI and TUI. The engine never reads them."""

    workers: int | None = None
    total_units: int = TOTAL_UNITS
    workload: WorkloadParams = field(default_factory=WorkloadParams)
    log_level: str = "INFO"
    console: str = "auto"


def _positive_int(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{key} must be a positive integer, got {value!r}")
    return value


def _workload_from_dict(d: dict[str, Any]) -> WorkloadParams:
    defaults = WorkloadParams()
    return WorkloadParams(
        fibonacci_n=_positive_int(d, "fibonacci_n", defaults.fibonacci_n),
        matrix_size=_positive_int(d, "matrix_size", defaults.matrix_size),
        monte_carlo_iterations=_positive_int(
            d, "monte_carlo_iterations", defaults.monte_carlo_iterations
        ),
        prime_limit=_positive_int(d, "prime_limit", defaults.prime_limit),
    )


def config_from_dict(d: dict[str, Any]) -> BenchmarkConfig:
    """Build a BenchmarkConfig from parsed YAML. Unknown keys are ignored."""
    workers: int | None = None
    if d.get("workers") is not None:
        workers = _positive_int(d, "workers", 1)

    workload_raw = d.get("workload") or {}
    if not isinstance(workload_raw, dict):
        raise ConfigError("workload must be a mapping")

    log_level = str(d.get("log_level", "INFO")).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    console = str(d.get("console", "auto")).lower()
    if console not in CONSOLE_BACKENDS:
        raise ConfigError(f"console must be one of {', '.join(CONSOLE_BACKENDS)}")

    return BenchmarkConfig(
        workers=workers,
        total_units=_positive_int(d, "total_units", TOTAL_UNITS),
        workload=_workload_from_dict(workload_raw),
        log_level=log_level,
        console=console,
    )


def load_config(path: Path) -> BenchmarkConfig:
    """Load configuration from a YAML file. A missing file gives defaults."""
    if not path.exists():
        return BenchmarkConfig()
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"cannot parse {path}: {e}") from e
    if data is None:
        return BenchmarkConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return config_from_dict(data)
