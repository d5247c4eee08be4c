"""cpubench.console -- terminal output for the command line.

Usage (any file)::

    from cpubench.console import console

    console.info("Hello")
    console.progress(0.5, "single-thread")
    console.kv({"CPU cores": "8"})

Configuration (call once in ``cli.py:main()``)::

    from cpubench.console import configure

    configure(backend="auto")  # "rich" | "plain" | "auto"
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from cpubench.console._plain import PlainBackend

if TYPE_CHECKING:
    from cpubench.console._protocol import ConsoleProtocol

# ---------------------------------------------------------------------------
# Global singleton -- defaults to PlainBackend
# ---------------------------------------------------------------------------

_backend: ConsoleProtocol = PlainBackend()


def configure(*, backend: str = "auto") -> None:
    """Select the console backend.

    Args:
        backend: ``"rich"`` -- always use Rich.
                 ``"plain"`` -- always use plain text.
                 ``"auto"`` (default) -- Rich when stdout is a TTY,
                 plain otherwise.
    """
    global _backend  # noqa: PLW0603

    if backend == "auto":
        backend = "rich" if sys.stdout.isatty() else "plain"

    if backend == "rich":
        from cpubench.console._rich import RichBackend

        _backend = RichBackend()
    else:
        _backend = PlainBackend()


def get_console() -> ConsoleProtocol:
    """Return the current backend instance."""
    return _backend


# ---------------------------------------------------------------------------
# Proxy object -- ``from cpubench.console import console``
# ---------------------------------------------------------------------------


class _ConsoleProxy:
    """Transparent proxy that delegates to the current ``_backend``.

    Callers import ``console`` once at module level and pick up any later
    ``configure()`` call.
    """

    def __getattr__(self, name: str) -> object:
        return getattr(_backend, name)


console: ConsoleProtocol = _ConsoleProxy()  # type: ignore[assignment]
