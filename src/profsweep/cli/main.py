# Copyright (c) Syntropy Systems
"""Main CLI entry point for profsweep."""

import logging

import typer
from rich.logging import RichHandler

from profsweep.cli.doctor import doctor
from profsweep.cli.init_cmd import init
from profsweep.cli.plan import plan
from profsweep.cli.report import report
from profsweep.cli.run import console, run
from profsweep.cli.status import status

app = typer.Typer(
    name="profsweep",
    help=(
        "Sweep Cargo release-profile settings. Build with each knob flipped, "
        "time it, rank the results."
    ),
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging, including each cargo command line",
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# Register commands
_ = app.command()(init)
_ = app.command()(plan)
_ = app.command()(run)
_ = app.command()(status)
_ = app.command()(report)
_ = app.command()(doctor)


if __name__ == "__main__":
    app()
