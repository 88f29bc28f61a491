from __future__ import annotations

from pathlib import Path

import typer

from switchwatch.config import load_settings, read_token
from switchwatch.errors import ConfigError
from switchwatch.models import Settings


def load_settings_or_exit(path: Path) -> Settings:
    try:
        return load_settings(path)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(exc.exit_code) from exc


def read_token_or_exit(path: Path) -> str:
    try:
        return read_token(path)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(exc.exit_code) from exc
