# Copyright (c) Syntropy Systems
"""profsweep report command."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from profsweep.config import load_settings
from profsweep.errors import ProfsweepError
from profsweep.report import baseline_entry, build_report, delta_seconds, write_report
from profsweep.state import read_state

if TYPE_CHECKING:
    from collections.abc import Sequence

    from profsweep.models.state import ReportEntry

console = Console()


def print_report(report: Sequence[ReportEntry]) -> None:
    """Render a ranked report as a table, fastest first."""
    control = baseline_entry(report)

    table = Table(title="Experiments by total time (fastest first)")
    table.add_column("Rank", style="dim")
    table.add_column("Experiment")
    table.add_column("Build", justify="right")
    table.add_column("Run", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("vs baseline", justify="right")

    for entry in report:
        delta = delta_seconds(entry, control)
        if delta is None or entry.experiment.is_control:
            delta_str = "-"
        else:
            style = "green" if delta < 0 else "red"
            delta_str = f"[{style}]{delta:+.2f}s[/{style}]"

        name = entry.experiment.label
        if entry.experiment.is_control:
            name = f"[bold]{name}[/bold]"

        table.add_row(
            str(entry.rank),
            name,
            f"{entry.result.build_seconds:.2f}s",
            f"{entry.result.run_seconds:.2f}s",
            f"{entry.result.total_seconds:.2f}s",
            delta_str,
        )

    console.print(table)

    if report:
        winner = report[0]
        console.print(f"\n[green]Fastest:[/green] {winner.experiment.label}")
        console.print(f"  Total: {winner.result.total_seconds:.2f}s")


def report(
    data_dir: Path = typer.Option(
        Path(),
        "--data-dir",
        "-d",
        envvar="PROFSWEEP_DATA_DIR",
        help="Directory holding profsweep.yaml and the state file",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Also export the ranking (.csv or .json)",
    ),
) -> None:
    """Rank the experiments of a completed sweep by build + run time.

    Example:
        profsweep report --output ranking.csv

    """
    try:
        settings = load_settings(data_dir)
        state = read_state(settings.state_path)
    except (ProfsweepError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if state is None:
        console.print("[yellow]No sweep found.[/yellow] Run 'profsweep run' first.")
        raise typer.Exit(1)

    if not state.is_complete:
        console.print(
            f"[yellow]Sweep incomplete:[/yellow] {len(state.results)}/"
            f"{len(state.plan.cases)} experiments recorded. "
            "Run 'profsweep run' to finish it."
        )
        raise typer.Exit(1)

    ranking = build_report(state)
    print_report(ranking)

    if output is not None:
        try:
            write_report(ranking, output)
        except (OSError, ValueError) as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise typer.Exit(1) from e
        console.print(f"[green]Exported {len(ranking)} experiment(s) to {output}[/green]")
