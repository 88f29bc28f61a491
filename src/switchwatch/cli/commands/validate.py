from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from switchwatch.cli.common import load_settings_or_exit
from switchwatch.config import CONFIG_ENV_VAR


def validate(
    configuration: Annotated[
        Path,
        typer.Option(
            "--configuration",
            "--config",
            envvar=CONFIG_ENV_VAR,
            help="JSON, TOML or YAML configuration file",
        ),
    ],
) -> None:
    """Validate a configuration file without contacting any device."""
    settings = load_settings_or_exit(configuration)

    console = Console()
    table = Table()
    table.add_column("Binary Sensor", style="cyan")
    table.add_column("Default", style="yellow")
    table.add_column("Hosts", style="green")

    for name, sensor in settings.binary_sensors.items():
        table.add_row(name, sensor.default_state, ", ".join(sensor.hosts))

    console.print(table)
    console.print(f"Home Assistant: {settings.home_assistant_url}")
    console.print(f"Poll interval: {settings.poll_interval_ms:g}ms")
    console.print(f"Device timeout: {settings.device_timeout_ms:g}ms")
    console.print(f"Device port: {settings.device.port}")
    console.print("[green]✓[/green] Configuration is valid")


def register(app: typer.Typer) -> None:
    app.command()(validate)
