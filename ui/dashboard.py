"""
Rich-based terminal dashboard for netprobe results.

All formatting helpers live in ``probe.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from probe.history import HistoryEntry, format_history_rows, sparkline
from probe.results import ProbeOutcome, TestRun
from probe.stats import format_latency, format_speed, numeric_values, summarize

console = Console()


# ---------------------------------------------------------------------------
# Chart helper
# ---------------------------------------------------------------------------

def create_bar(value: float, scale: float, width: int = 30) -> str:
    """Horizontal bar of *width* cells scaled against *scale*."""
    if scale <= 0 or value <= 0:
        return ""
    cells = max(1, min(width, int(round(value / scale * width))))
    return "█" * cells


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header() -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Network Speed Test[/bold cyan]\n"
            "[dim]Latency, download, and upload against public endpoints[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def _status(outcome: ProbeOutcome) -> str:
    if outcome.success:
        return f"[dim]{escape(outcome.source or '')}[/dim]"
    return f"[red]{escape(outcome.error or '')}[/red]"


def print_run_result(run: TestRun) -> None:
    """Results panel followed by a bar chart of the three metrics."""
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="bold white")
    table.add_column(justify="right")
    table.add_column()
    table.add_row(
        "Latency:", f"[bold yellow]{format_latency(run.latency.metric)}[/bold yellow]",
        _status(run.latency),
    )
    table.add_row(
        "Download:", f"[bold green]{format_speed(run.download_speed.metric)}[/bold green]",
        _status(run.download_speed),
    )
    table.add_row(
        "Upload:", f"[bold blue]{format_speed(run.upload_speed.metric)}[/bold blue]",
        _status(run.upload_speed),
    )

    console.print()
    console.print(Panel.fit(table, title="[bold]Results[/bold]", border_style="cyan"))
    print_chart(run)


def print_chart(run: TestRun) -> None:
    """Bar chart of latency / download / upload, failures drawn as empty."""
    outcomes = [
        ("Latency", run.latency, "yellow", format_latency),
        ("Download", run.download_speed, "green", format_speed),
        ("Upload", run.upload_speed, "blue", format_speed),
    ]
    scale = max(numeric_values(o.metric for _, o, _, _ in outcomes), default=0.0)

    chart = Table(title="Network Speed", box=box.SIMPLE, show_header=False)
    chart.add_column(style="bold")
    chart.add_column()
    chart.add_column(justify="right")
    for label, outcome, color, fmt in outcomes:
        chart.add_row(
            label,
            f"[{color}]{create_bar(outcome.value or 0, scale)}[/{color}]",
            fmt(outcome.metric) if outcome.success else "[red]Error[/red]",
        )
    console.print(chart)


def print_history(entries: List[HistoryEntry], limit: Optional[int] = 20) -> None:
    """History table (newest last) with per-metric sparklines."""
    if not entries:
        console.print("[dim]No test history yet.[/dim]")
        return

    if limit is not None and limit < 0:
        raise ValueError("limit must be 0 or greater")
    shown = entries[-limit:] if limit else entries

    table = Table(title="Test History", box=box.ROUNDED)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Date")
    table.add_column("Latency", justify="right")
    table.add_column("Download", justify="right")
    table.add_column("Upload", justify="right")

    offset = len(entries) - len(shown)
    for i, row in enumerate(format_history_rows(shown), start=offset + 1):
        table.add_row(
            str(i),
            row["date"],
            format_latency(row["latency"]),
            format_speed(row["download"]),
            format_speed(row["upload"]),
        )
    console.print(table)

    lines = []
    for label, column, fmt in (
        ("Latency ", [e.latency for e in shown], format_latency),
        ("Download", [e.download_speed for e in shown], format_speed),
        ("Upload  ", [e.upload_speed for e in shown], format_speed),
    ):
        s = summarize(column)
        spark = sparkline(numeric_values(column)) or "-"
        avg = fmt(s.mean) if s.count else "n/a"
        lines.append(f"{label}  [cyan]{spark}[/cyan]  [dim]avg {avg}, {s.failures} failed[/dim]")
    console.print(Panel("\n".join(lines), title="Trend"))


# ---------------------------------------------------------------------------
# Progress display
# ---------------------------------------------------------------------------

class ProgressDisplay:
    """Spinner shown while a run is in flight (there is no % to report)."""

    def __init__(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        )

    def start(self, description: str) -> None:
        self.progress.start()
        self.progress.add_task(description, total=None)

    def stop(self) -> None:
        self.progress.stop()
