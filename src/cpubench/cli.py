"""
cpubench CLI -- entry point for the command line and the TUI.

Usage:
  cpubench single
  cpubench multi [--workers N]
  cpubench compare [--workers N]
  cpubench info
  cpubench init
  cpubench tui
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from cpubench.config import config_file, log_file
from cpubench.console import configure, console
from cpubench.device import DeviceInfo
from cpubench.domain.models import Completed, Failed, Running, RunState, ThreadMode
from cpubench.engine.errors import InvalidWorkerCountError
from cpubench.engine.partition import plan_partition
from cpubench.engine.runner import BenchmarkEngine
from cpubench.session.controller import BenchmarkSession
from cpubench.settings.initializer import initialize
from cpubench.settings.loader import BenchmarkConfig, ConfigError, load_config

logger = logging.getLogger("cpubench")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def _setup_logging(project_dir: Path, level: int) -> None:
    """Configure file logging to .cpubench/logs/cpubench.log."""
    path = log_file(project_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def _log_level(args: argparse.Namespace, config: BenchmarkConfig) -> int:
    if args.verbose:
        return logging.DEBUG
    if args.quiet:
        return logging.WARNING
    return logging.getLevelName(config.log_level)


def resolve_workers(args: argparse.Namespace, config: BenchmarkConfig, device: DeviceInfo) -> int:
    """Pick the worker count: --workers, then the config file, then core count."""
    workers = getattr(args, "workers", None)
    if workers is not None:
        return int(workers)
    if config.workers is not None:
        return config.workers
    return device.cores


class _ConsoleListener:
    """Renders session state changes as a console progress bar."""

    def __init__(self) -> None:
        self.label = ""
        self.show_worker = False

    def on_state_change(self, state: RunState) -> None:
        if isinstance(state, Running):
            label = self.label
            if self.show_worker:
                label = f"{label} (worker {state.active_workers})"
            console.progress(state.progress, label)


async def run_modes(
    session: BenchmarkSession,
    listener: _ConsoleListener,
    modes: list[ThreadMode],
) -> int:
    """Run each mode in turn through *session* and print the outcome."""
    for mode in modes:
        if mode is ThreadMode.SINGLE_THREAD:
            listener.label = "Single-thread"
            listener.show_worker = False
            session.start_single()
        else:
            listener.label = f"Multi-thread x{session.worker_count}"
            listener.show_worker = True
            session.start_multi()
        await session.wait()
        console.progress_end()

        state = session.state
        if isinstance(state, Completed):
            console.result(state.result)
        elif isinstance(state, Failed):
            console.error(f"Benchmark failed: {state.reason}")
            return EXIT_FAILED
        else:
            console.warning("Benchmark cancelled")
            return EXIT_INTERRUPTED

    comparison = session.comparison()
    if comparison is not None:
        console.comparison(comparison)
    return EXIT_OK


def _warn_partition(config: BenchmarkConfig, workers: int) -> None:
    partition = plan_partition(config.total_units, workers)
    if partition.uses_fallback:
        console.warning(
            f"{workers} workers exceed {config.total_units} units; "
            f"using the fixed-partition fallback"
        )
    elif partition.dropped_units:
        console.warning(
            f"{partition.dropped_units} of {config.total_units} units are not run "
            f"with {workers} workers ({partition.units_per_worker} each)"
        )


def cmd_run(args: argparse.Namespace, config: BenchmarkConfig, modes: list[ThreadMode]) -> int:
    """Run the benchmark in the given modes."""
    device = DeviceInfo.detect()
    workers = resolve_workers(args, config, device)
    if workers < 1:
        console.error(f"--workers must be at least 1, got {workers}")
        return EXIT_USAGE

    console.kv(device.describe(), title="Device")
    if ThreadMode.MULTI_THREAD in modes:
        console.info(f"Using {workers} workers")
        _warn_partition(config, workers)

    engine = BenchmarkEngine(config.workload)
    listener = _ConsoleListener()
    session = BenchmarkSession(engine, workers, listener, total_units=config.total_units)
    try:
        return asyncio.run(run_modes(session, listener, modes))
    except KeyboardInterrupt:
        console.progress_end()
        console.warning("Benchmark interrupted")
        return EXIT_INTERRUPTED
    except InvalidWorkerCountError as e:
        console.error(str(e))
        return EXIT_USAGE


def cmd_info(args: argparse.Namespace, config: BenchmarkConfig) -> int:
    """Display device information and the effective settings."""
    device = DeviceInfo.detect()
    console.kv(device.describe(), title="Device")
    workload = config.workload
    console.kv(
        {
            "Workers": str(resolve_workers(args, config, device)),
            "Work units": str(config.total_units),
            "Fibonacci n": str(workload.fibonacci_n),
            "Matrix size": str(workload.matrix_size),
            "Monte-Carlo iterations": str(workload.monte_carlo_iterations),
            "Prime limit": str(workload.prime_limit),
        },
        title="Benchmark",
    )
    return EXIT_OK


def cmd_init(project_dir: Path) -> int:
    """Create .cpubench/ with a default config file."""
    root = initialize(project_dir)
    console.success(f"Initialized {root}")
    return EXIT_OK


def cmd_tui(project_dir: Path, config: BenchmarkConfig, workers: int | None) -> int:
    """Launch the Textual interface."""
    if workers is not None and workers < 1:
        console.error(f"--workers must be at least 1, got {workers}")
        return EXIT_USAGE

    from cpubench.tui.app import CpuBenchApp

    app = CpuBenchApp(project_dir=project_dir, config=config, workers=workers)
    app.run()
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpubench",
        description="cpubench -- single- and multi-threaded CPU benchmark",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("single", help="Run the single-thread benchmark")

    multi_p = sub.add_parser("multi", help="Run the multi-thread benchmark")
    multi_p.add_argument("--workers", type=int, default=None, help="Worker threads")

    compare_p = sub.add_parser("compare", help="Run both benchmarks and compare")
    compare_p.add_argument("--workers", type=int, default=None, help="Worker threads")

    sub.add_parser("info", help="Show device information and settings")
    sub.add_parser("init", help="Create .cpubench/config.yaml")

    tui_p = sub.add_parser("tui", help="Open the interactive interface")
    tui_p.add_argument("--workers", type=int, default=None, help="Worker threads")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the `cpubench` command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    project_dir = Path.cwd()

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_USAGE)

    try:
        config = load_config(args.config or config_file(project_dir))
    except ConfigError as e:
        configure(backend="plain")
        console.error(str(e))
        sys.exit(EXIT_USAGE)

    # -- Console configuration ----------------------------------------------
    configure(backend=config.console)

    # -- Logging configuration (file-based audit log) -----------------------
    _setup_logging(project_dir, _log_level(args, config))
    logger.debug("Command %s with %s", args.command, config)

    if args.command == "single":
        code = cmd_run(args, config, [ThreadMode.SINGLE_THREAD])
    elif args.command == "multi":
        code = cmd_run(args, config, [ThreadMode.MULTI_THREAD])
    elif args.command == "compare":
        code = cmd_run(args, config, [ThreadMode.SINGLE_THREAD, ThreadMode.MULTI_THREAD])
    elif args.command == "info":
        code = cmd_info(args, config)
    elif args.command == "init":
        code = cmd_init(project_dir)
    else:
        code = cmd_tui(project_dir, config, args.workers)
    sys.exit(code)


if __name__ == "__main__":
    main()
