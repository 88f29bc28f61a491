from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any

import yaml

from switchwatch.errors import ConfigError, ExitCode
from switchwatch.models import Settings

from .validation import validate_document

CONFIG_ENV_VAR = "SWITCHWATCH_CONFIG"


def expand_path(value: str | Path) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(str(value))))


def read_token(path: str | Path) -> str:
    """Read the Home Assistant long-lived access token."""
    token_path = expand_path(path)
    try:
        token = token_path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(
            f'Could not read the Home Assistant token file "{token_path}".',
            ExitCode.CANNOT_READ_TOKEN_FILE,
        ) from exc
    if not token:
        raise ConfigError(
            f'The Home Assistant token file "{token_path}" is empty.',
            ExitCode.CANNOT_READ_TOKEN_FILE,
        )
    return token


def _parse(text: str, suffix: str) -> Any:
    if suffix == ".toml":
        return tomllib.loads(text)
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def read_document(path: str | Path) -> Any:
    """Read and parse a JSON, TOML or YAML configuration file."""
    config_path = expand_path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(
            f'Could not read the configuration file "{config_path}".',
            ExitCode.CANNOT_READ_CONFIG_FILE,
        ) from exc
    if not text.strip():
        raise ConfigError(
            f'The configuration file "{config_path}" is empty.',
            ExitCode.CANNOT_READ_CONFIG_FILE,
        )

    try:
        return _parse(text, config_path.suffix.lower())
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(
            f'Could not parse the configuration file "{config_path}".\n{exc}',
            ExitCode.CANNOT_PARSE_CONFIG_FILE,
        ) from exc


def load_settings(path: str | Path) -> Settings:
    config_path = expand_path(path)
    return validate_document(read_document(config_path), source=str(config_path))
