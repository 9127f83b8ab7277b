# Copyright (c) Syntropy Systems
"""profsweep plan command."""
from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from profsweep.config import load_settings
from profsweep.errors import ProfsweepError
from profsweep.state import new_state, read_state

console = Console()


def plan(
    data_dir: Path = typer.Option(
        Path(),
        "--data-dir",
        "-d",
        envvar="PROFSWEEP_DATA_DIR",
        help="Directory holding profsweep.yaml and the state file",
    ),
) -> None:
    """Preview the baseline and the ordered list of experiments.

    Shows the persisted plan when a sweep is in progress, otherwise the
    plan a new sweep would use. Nothing is run.
    """
    try:
        settings = load_settings(data_dir)
        catalog = settings.catalog_definitions()
        state = read_state(settings.state_path) or new_state(catalog)
    except (ProfsweepError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    baseline = Table(title="Baseline")
    baseline.add_column("Knob")
    baseline.add_column("Value")
    baseline.add_column("Env var", style="dim")
    baseline.add_column("Alternatives", style="dim")
    for item in state.plan.baseline:
        baseline.add_row(
            item.knob.path,
            item.value,
            item.knob.env_var,
            ", ".join(item.knob.allowed_values) or "-",
        )
    console.print(baseline)

    cases = Table(title="Experiments")
    cases.add_column("#", style="dim")
    cases.add_column("Experiment")
    cases.add_column("Status")

    for index, experiment in enumerate(state.plan.cases):
        done = index < state.next_index
        cases.add_row(
            str(index),
            experiment.label,
            "[green]done[/green]" if done else "pending",
        )

    console.print(cases)
    console.print(f"\n[bold]{len(state.plan.cases)} experiments[/bold] planned")
    console.print(f"  [dim]state:[/dim] {settings.state_path}")
