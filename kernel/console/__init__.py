"""kernel.console -- where the auditor's reports are printed.

Modules print through one shared object::

    from kernel.console import console

    console.section("Efficiency audit")
    console.meter("Efficiency", "████░░░░", "50%", ratio=50.0)

``cli.py:main()`` picks the backend once, before any command runs::

    configure(backend="plain")   # --plain, pipes, CI logs
    configure(backend="auto")    # Rich on a terminal, plain elsewhere

Nothing here imports from ``modules``; callers hand the console text that is
already formatted.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TYPE_CHECKING

from kernel.console._plain import PlainBackend

if TYPE_CHECKING:
    from kernel.console._protocol import ConsoleProtocol


def _rich_backend() -> ConsoleProtocol:
    from kernel.console._rich import RichBackend

    return RichBackend()


_FACTORIES: dict[str, Callable[[], ConsoleProtocol]] = {
    "plain": PlainBackend,
    "rich": _rich_backend,
}

_backend: ConsoleProtocol = PlainBackend()


def resolve_backend_name(backend: str) -> str:
    """Map ``"auto"`` to the concrete backend for the current stdout."""
    if backend == "auto":
        return "rich" if sys.stdout.isatty() else "plain"
    if backend not in _FACTORIES:
        raise ValueError(f"Unknown console backend {backend!r} (expected auto, plain or rich)")
    return backend


def configure(*, backend: str = "auto") -> ConsoleProtocol:
    """Install the backend named *backend* and return it."""
    return use_backend(_FACTORIES[resolve_backend_name(backend)]())


def use_backend(instance: ConsoleProtocol) -> ConsoleProtocol:
    """Install an already built backend and return it."""
    global _backend  # noqa: PLW0603
    _backend = instance
    return instance


def get_console() -> ConsoleProtocol:
    return _backend


class _CurrentBackend:
    """Forwards attribute lookups to whatever backend is installed right now."""

    def __getattr__(self, name: str) -> object:
        return getattr(_backend, name)


console: ConsoleProtocol = _CurrentBackend()  # type: ignore[assignment]
