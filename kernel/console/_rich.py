"""kernel.console._rich -- Rich-based terminal backend.

Provides coloured, structured terminal output using the Rich library.
"""

from __future__ import annotations

from typing import IO

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "info": "blue",
        "success": "bold green",
        "warning": "bold yellow",
        "error": "bold red",
        "meter.good": "green",
        "meter.fair": "yellow",
        "meter.poor": "red",
        "dim": "dim",
    }
)


def _meter_style(ratio: float) -> str:
    if ratio >= 80:
        return "meter.good"
    if ratio >= 40:
        return "meter.fair"
    return "meter.poor"


class RichBackend:
    """ConsoleProtocol implementation backed by Rich."""

    def __init__(self, file: IO[str] | None = None) -> None:
        self._con = Console(theme=_THEME, highlight=False, file=file)

    # -- General messages ---------------------------------------------------

    def info(self, message: str) -> None:
        self._con.print(f"  {escape(message)}", style="info")

    def success(self, message: str) -> None:
        self._con.print(f"  ✓ {escape(message)}", style="success")

    def warning(self, message: str) -> None:
        self._con.print(f"  ⚠ {escape(message)}", style="warning")

    def error(self, message: str) -> None:
        self._con.print(f"  ✗ {escape(message)}", style="error")

    # -- Structured panels --------------------------------------------------

    def panel(self, content: str, *, title: str = "", style: str = "") -> None:
        self._con.print(
            Panel(escape(content), title=title or None, border_style=style or "dim"),
        )

    def table(self, headers: list[str], rows: list[list[str]], *, title: str = "") -> None:
        t = Table(title=title or None, box=box.SIMPLE, show_edge=False, pad_edge=True)
        for h in headers:
            t.add_column(h)
        for r in rows:
            t.add_row(*(escape(cell) for cell in r))
        self._con.print(t)

    def kv(self, data: dict[str, str], *, title: str = "") -> None:
        t = Table(
            title=title or None,
            box=box.SIMPLE,
            show_header=False,
            show_edge=False,
            pad_edge=True,
        )
        t.add_column("Key", style="bold", justify="right")
        t.add_column("Value")
        for k, v in data.items():
            t.add_row(k, escape(v))
        self._con.print(t)

    # -- Reports ------------------------------------------------------------

    def section(self, title: str) -> None:
        self._con.print()
        self._con.print(Rule(f" {escape(title)} ", style="bold", align="left"))

    def meter(self, label: str, bar: str, text: str, *, ratio: float) -> None:
        self._con.print(f"  [bold]{escape(label)}[/] [{_meter_style(ratio)}]{bar}[/] {escape(text)}")
