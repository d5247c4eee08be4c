"""Host information used to pick a default worker count and label results."""

import os
import platform
from dataclasses import dataclass


def cpu_core_count() -> int:
    """Return the number of logical CPUs available, never less than one."""
    if hasattr(os, "process_cpu_count"):
        count = os.process_cpu_count()
    else:
        count = os.cpu_count()
    return max(1, count or 1)


def device_model() -> str:
    """Return a short description of the machine, e.g. ``Linux x86_64``."""
    return f"{platform.system()} {platform.machine()}".strip() or "unknown"


def estimated_cpu_class(cores: int) -> str:
    """Rough tier label derived from the core count alone."""
    if cores <= 4:
        return f"Low-power ({cores} cores)"
    if cores <= 8:
        return f"Performance ({cores} cores)"
    return f"Flagship ({cores} cores)"


@dataclass(frozen=True)
class DeviceInfo:
    """Snapshot of the host the benchmark runs on."""

    model: str
    cores: int
    cpu_class: str
    python: str

    @classmethod
    def detect(cls) -> "DeviceInfo":
        cores = cpu_core_count()
        return cls(
            model=device_model(),
            cores=cores,
            cpu_class=estimated_cpu_class(cores),
            python=f"{platform.python_implementation()} {platform.python_version()}",
        )

    def describe(self) -> dict[str, str]:
        return {
            "Device": self.model,
            "CPU cores": str(self.cores),
            "CPU class": self.cpu_class,
            "Python": self.python,
        }
