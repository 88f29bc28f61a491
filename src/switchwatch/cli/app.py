from __future__ import annotations

from typing import Annotated

import typer

from switchwatch.errors import ExitCode
from switchwatch.utils.logging import setup_logging

from .commands.exit_codes import register as register_exit_codes
from .commands.validate import register as register_validate
from .commands.watch import register as register_watch

EPILOG = "Exit codes: " + ", ".join(
    f"{code.value} {code.description.lower()}" for code in ExitCode
)

app = typer.Typer(
    help=(
        "Watch groups of ESPHome switches and mirror each group's state into a "
        "Home Assistant binary sensor."
    ),
    epilog=EPILOG,
    no_args_is_help=True,
)

register_watch(app)
register_validate(app)
register_exit_codes(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="CRITICAL, ERROR, WARNING, INFO or DEBUG (default: $LOGLEVEL)",
        ),
    ] = None,
) -> None:
    """switchwatch CLI."""
    setup_logging(log_level)

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"switchwatch version {get_version('switchwatch')}")
        raise typer.Exit()
