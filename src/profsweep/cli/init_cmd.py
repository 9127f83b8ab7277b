# Copyright (c) Syntropy Systems
"""profsweep init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from profsweep.config import CONFIG_FILENAME, default_config_data

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Data directory to initialize (default: current directory)",
    ),
    manifest_path: Path = typer.Option(
        Path("Cargo.toml"),
        "--manifest-path",
        "-m",
        help="Cargo.toml of the crate to measure",
    ),
) -> None:
    """Write a default profsweep.yaml with the built-in knob catalog.

    Edit the file to choose the benchmark target or trim the catalog.
    """
    target = path.resolve()
    config_path = target / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {config_path}")
        return

    target.mkdir(parents=True, exist_ok=True)

    config = default_config_data()
    config["manifest_path"] = str(manifest_path)

    with config_path.open("w") as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)

    catalog = config["catalog"]
    knob_count = len(catalog) if isinstance(catalog, list) else 0
    console.print(f"[green]Initialized profsweep:[/green] {config_path}")
    console.print(f"  [dim]manifest:[/dim] {manifest_path}")
    console.print(f"  [dim]knobs:[/dim] {knob_count}")
    console.print("\nNext steps:")
    console.print("  1. Set [cyan]target_args[/cyan], e.g. [--bench, throughput]")
    console.print("  2. Preview:   [cyan]profsweep plan[/cyan]")
    console.print("  3. Run:       [cyan]profsweep run[/cyan]")
