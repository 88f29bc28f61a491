from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer

from switchwatch.cli.common import load_settings_or_exit, read_token_or_exit
from switchwatch.config import CONFIG_ENV_VAR
from switchwatch.core import run_watcher
from switchwatch.errors import ExitCode, SwitchWatchError

logger = logging.getLogger(__name__)


def watch(
    ha_token_file: Annotated[
        Path,
        typer.Option(
            "--ha-token-file",
            help="File containing the Home Assistant long-lived access token",
        ),
    ],
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
    """Watch the configured switches and update Home Assistant on changes."""
    token = read_token_or_exit(ha_token_file)
    settings = load_settings_or_exit(configuration)

    logger.info(
        "Starting with %d binary sensor(s), poll interval %gms, device timeout %gms",
        len(settings.binary_sensors),
        settings.poll_interval_ms,
        settings.device_timeout_ms,
    )
    try:
        asyncio.run(run_watcher(settings, token))
    except SwitchWatchError as exc:
        logger.error("Startup failed: %s", exc)
        raise typer.Exit(ExitCode.STARTUP_FAILED) from exc
    except KeyboardInterrupt:
        # Ctrl+C while groups are still being registered
        logger.info("Interrupted, exiting")


def register(app: typer.Typer) -> None:
    app.command()(watch)
