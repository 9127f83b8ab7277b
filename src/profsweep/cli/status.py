# Copyright (c) Syntropy Systems
"""profsweep status command."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from profsweep.config import load_settings
from profsweep.errors import ProfsweepError
from profsweep.state import read_state

console = Console()


def format_seconds(seconds: float) -> str:
    """Format a duration in seconds for display."""
    total_seconds = int(seconds)

    if total_seconds < 60:
        return f"{seconds:.1f}s"
    if total_seconds < 3600:
        minutes = total_seconds // 60
        return f"{minutes}m {total_seconds % 60}s"
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def status(
    data_dir: Path = typer.Option(
        Path(),
        "--data-dir",
        "-d",
        envvar="PROFSWEEP_DATA_DIR",
        help="Directory holding profsweep.yaml and the state file",
    ),
) -> None:
    """Show how far the current sweep has got."""
    try:
        settings = load_settings(data_dir)
        state = read_state(settings.state_path)
    except (ProfsweepError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if state is None:
        console.print(f"[yellow]No sweep started[/yellow] ({settings.state_path})")
        console.print("Run: [cyan]profsweep run[/cyan]")
        return

    done = len(state.results)
    total = len(state.plan.cases)
    elapsed = sum(result.total_seconds for result in state.results)

    console.print(f"[bold]Sweep:[/bold] {settings.state_path}")
    console.print(f"  [dim]started:[/dim] {state.created_at}")
    if state.updated_at:
        console.print(f"  [dim]last checkpoint:[/dim] {state.updated_at}")
    console.print(f"  [dim]completed:[/dim] {done}/{total}")
    console.print(f"  [dim]measured time:[/dim] {format_seconds(elapsed)}")

    if state.is_complete:
        console.print("\n[green]Complete.[/green] Run: [cyan]profsweep report[/cyan]")
        return

    next_index, next_case = state.pending_cases()[0]
    console.print(f"\n[bold]Next:[/bold] #{next_index} {next_case.label}")
