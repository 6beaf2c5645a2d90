from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from visit_counter.domain import cells
from visit_counter.domain.models import ResultSet


def result_to_rich_table(result: ResultSet, title: Optional[str] = None) -> Table:
    """
    Build a rich Table from a ResultSet, consuming its rows.

    Integer and real columns are right-aligned based on the first row seen;
    nulls render as a dimmed dash.
    """
    table = Table(title=title, box=box.SIMPLE_HEAVY, show_lines=False)
    rows = list(result)
    first = rows[0] if rows else ()

    for index, column in enumerate(result.columns):
        numeric = index < len(first) and isinstance(
            first[index], (cells.IntegerCell, cells.RealCell)
        )
        table.add_column(column or "-", justify="right" if numeric else "left")

    for row in rows:
        rendered = []
        for cell in row:
            if isinstance(cell, cells.NullCell):
                rendered.append(Text("-", style="dim"))
            else:
                rendered.append(Text(cells.to_display(cell)))
        table.add_row(*rendered)

    return table


def print_scoreboard(result: ResultSet, console: Optional[Console] = None) -> None:
    """
    Print the visit counter table to the terminal.
    """
    console = console or Console()
    table = result_to_rich_table(result, title="Visits by country and city")
    console.print(table)
    if not table.row_count:
        console.print("[yellow]No visits recorded yet.[/yellow]")


__all__ = ["result_to_rich_table", "print_scoreboard"]
