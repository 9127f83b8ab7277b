# Copyright (c) Syntropy Systems
"""profsweep doctor command."""
from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from profsweep.config import load_settings
from profsweep.errors import ProfsweepError
from profsweep.state import read_state

console = Console()


def doctor(
    data_dir: Path = typer.Option(
        Path(),
        "--data-dir",
        "-d",
        envvar="PROFSWEEP_DATA_DIR",
        help="Directory holding profsweep.yaml and the state file",
    ),
) -> None:
    """Check that a sweep can run here.

    Verifies:
    - profsweep.yaml parses and its catalog is valid
    - cargo is on PATH
    - the manifest exists
    - the state file, if any, is readable
    """
    issues: list[str] = []

    try:
        settings = load_settings(data_dir)
        catalog = settings.catalog_definitions()
    except ValueError as e:
        console.print(f"[red]✗[/red] Config: {escape(str(e))}")
        raise typer.Exit(1) from e

    if settings.config_path.exists():
        console.print(f"[green]✓[/green] Config: {settings.config_path}")
    else:
        console.print(f"[yellow]⚠[/yellow] No {settings.config_path.name}, using defaults")
    console.print(f"[green]✓[/green] Catalog: {len(catalog)} knobs")

    cargo_path = shutil.which(settings.cargo)
    if cargo_path is None:
        console.print(f"[red]✗[/red] Cargo not found: {settings.cargo}")
        issues.append("Cargo missing")
    else:
        version = "unknown version"
        try:
            result = subprocess.run(  # noqa: S603
                [cargo_path, "--version"],
                capture_output=True,
                text=True,
                timeout=10,
                check=False,
            )
            if result.returncode == 0:
                version = result.stdout.strip()
        except (OSError, subprocess.TimeoutExpired):
            pass
        console.print(f"[green]✓[/green] Cargo: {version}")

    if settings.manifest_path.is_file():
        console.print(f"[green]✓[/green] Manifest: {settings.manifest_path}")
    else:
        console.print(f"[red]✗[/red] Manifest not found: {settings.manifest_path}")
        issues.append("Manifest missing")

    try:
        state = read_state(settings.state_path)
    except ProfsweepError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        issues.append("State unreadable")
    else:
        if state is None:
            console.print("[green]✓[/green] State: none yet")
        else:
            done = len(state.results)
            total = len(state.plan.cases)
            console.print(f"[green]✓[/green] State: {done}/{total} recorded")

    if issues:
        console.print(f"\n[red]{len(issues)} issue(s) found[/red]")
        raise typer.Exit(1)

    console.print("\n[green]Ready to sweep[/green]")
