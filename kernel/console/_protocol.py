"""kernel.console._protocol -- ConsoleProtocol definition.

Pure standard-library typing.Protocol for the auditor's terminal output.
No external dependencies allowed in this file.
"""

from __future__ import annotations

from typing import Protocol


class ConsoleProtocol(Protocol):
    """Auditor terminal output protocol.

    Three layers of methods:

    **General messages** -- usable from any module::

        console.info("Loaded 100 cases")
        console.success("Benchmark finished")
        console.warning("Oracle unavailable, using heuristics")
        console.error("Could not read file")

    **Structured panels** -- tables, key-value displays, panels::

        console.panel("def f(): ...", title="Source")
        console.table(["Class", "Bound"], [["binary-search", "Ω(log n)"]], title="Bounds")
        console.kv({"Class": "comparison-sort", "Confidence": "0.90"})

    **Reports** -- efficiency output used by kernel/cli.py::

        console.section("Efficiency audit")
        console.meter("Efficiency", "███░░░░░", "38%", ratio=37.5)
    """

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        """Informational message."""
        ...

    def success(self, message: str) -> None:
        """Success / positive-outcome message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message."""
        ...

    # -- Structured panels --------------------------------------------------

    def panel(self, content: str, *, title: str = "", style: str = "") -> None:
        """Display *content* in a bordered panel."""
        ...

    def table(self, headers: list[str], rows: list[list[str]], *, title: str = "") -> None:
        """Display a table with *headers* and *rows*."""
        ...

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        """Display key-value pairs."""
        ...

    # -- Reports ------------------------------------------------------------

    def section(self, title: str) -> None:
        """Display a heading rule that opens a report section."""
        ...

    def meter(self, label: str, bar: str, text: str, *, ratio: float) -> None:
        """Display a prerendered *bar* and *text*; *ratio* (0-100) picks the colour."""
        ...
