# Copyright (c) Syntropy Systems
"""profsweep run command."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape

from profsweep.cargo import CargoInvoker
from profsweep.cli.report import print_report
from profsweep.config import load_settings
from profsweep.errors import BuildToolError, ProfsweepError
from profsweep.report import build_report, write_report
from profsweep.sweep import Sweep, SweepPhase

if TYPE_CHECKING:
    from profsweep.config import SweepSettings
    from profsweep.models.state import Experiment, ExperimentResult

console = Console()


def make_invoker(settings: SweepSettings) -> CargoInvoker:
    """Build the cargo invoker for one `profsweep run`."""
    log_dir = None
    if settings.capture_output:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        log_dir = settings.logs_dir / stamp

    return CargoInvoker(
        manifest_path=settings.manifest_path,
        cargo=settings.cargo,
        cargo_flags=list(settings.cargo_flags),
        log_dir=log_dir,
        kill_grace_period=settings.kill_grace_period,
    )


def run(
    data_dir: Path = typer.Option(
        Path(),
        "--data-dir",
        "-d",
        envvar="PROFSWEEP_DATA_DIR",
        help="Directory holding profsweep.yaml and the state file",
    ),
    manifest_path: Path | None = typer.Option(
        None,
        "--manifest-path",
        "-m",
        help="Cargo.toml of the crate to measure (overrides profsweep.yaml)",
    ),
    report_path: Path | None = typer.Option(
        None,
        "--report",
        "-r",
        help="Export the final ranking (.csv or .json)",
    ),
) -> None:
    """Run every pending experiment, then rank them.

    Progress is checkpointed after each experiment. If a build fails or the
    sweep is interrupted, running again picks up at the first experiment
    without a result.
    """
    try:
        settings = load_settings(data_dir, manifest_path)
        catalog = settings.catalog_definitions()
        sweep = Sweep.open(
            settings.state_path,
            catalog,
            make_invoker(settings),
            target_args=settings.target_args,
        )
    except (ProfsweepError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    state = sweep.state
    total = len(state.plan.cases)

    if sweep.phase is SweepPhase.RESUMING:
        console.print(
            f"[cyan]Resuming:[/cyan] {state.next_index}/{total} experiments recorded"
        )
    elif sweep.phase is SweepPhase.FRESH:
        console.print(f"[cyan]Starting sweep:[/cyan] {total} experiments")

    def on_case_start(index: int, experiment: Experiment) -> None:
        console.print(f"[bold][{index + 1}/{total}][/bold] {experiment.label}")

    def on_case_done(
        index: int, experiment: Experiment, result: ExperimentResult
    ) -> None:
        _ = index, experiment
        console.print(
            f"  [dim]build[/dim] {result.build_seconds:.2f}s  "
            f"[dim]run[/dim] {result.run_seconds:.2f}s"
        )

    try:
        state = sweep.run(on_case_start=on_case_start, on_case_done=on_case_done)
    except BuildToolError as e:
        console.print(f"[red]Experiment failed:[/red] {escape(str(e))}")
        console.print(
            f"  {state.next_index}/{total} recorded; "
            "fix the build and rerun to retry this experiment"
        )
        raise typer.Exit(1) from e
    except ProfsweepError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        console.print(
            f"\n[yellow]Interrupted[/yellow] with {state.next_index}/{total} "
            "recorded. Rerun to resume."
        )
        raise typer.Exit(130) from None

    console.print("\n[green]Sweep complete.[/green]")
    ranking = build_report(state)
    print_report(ranking)

    if report_path is not None:
        try:
            write_report(ranking, report_path)
        except (OSError, ValueError) as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
            raise typer.Exit(1) from e
        console.print(f"[green]Exported ranking to {report_path}[/green]")
