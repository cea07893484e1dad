"""Rich console output for computed metrics."""

from __future__ import annotations

import json
from decimal import Decimal

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..domain import TvlReport


def _format_amount(value: Decimal) -> str:
    """Group thousands and keep every displayed decimal place."""
    return f"{value:,f}"


def format_tvl_table(report: TvlReport, console: Console | None = None) -> None:
    """Print the per-position TVL breakdown and total."""
    console = console or Console()

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
    table.add_column("Position", style="cyan")
    table.add_column("TVL", style="green", justify="right")
    for item in report.detail:
        table.add_row(item.alias, _format_amount(item.tvl))
    table.add_section()
    table.add_row("[bold]Total[/]", f"[bold]{_format_amount(report.total)}[/]")

    console.print(Panel(table, title="[bold]Total Value Locked[/]", border_style="green"))


def format_metric(name: str, value: Decimal | int, console: Console | None = None) -> None:
    console = console or Console()
    console.print(f"[dim]{name}:[/] [green]{value}[/]")


def to_json(payload: object) -> str:
    """Serialize metrics, keeping decimals as exact strings."""

    def _default(o: object) -> str:
        if isinstance(o, Decimal):
            return str(o)
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

    return json.dumps(payload, indent=2, default=_default)
