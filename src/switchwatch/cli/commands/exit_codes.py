from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from switchwatch.errors import ExitCode


def exit_codes() -> None:
    """List the exit statuses used by switchwatch."""
    table = Table()
    table.add_column("Code", justify="right", style="cyan")
    table.add_column("Meaning")

    for code in ExitCode:
        table.add_row(str(code.value), code.description)

    Console().print(table)


def register(app: typer.Typer) -> None:
    app.command("exit-codes")(exit_codes)
