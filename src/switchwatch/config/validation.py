"""Checks on a parsed configuration document.

Each problem maps to its own exit code so that scripts driving the
watcher can tell configuration mistakes apart.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from switchwatch.errors import ConfigError, ExitCode
from switchwatch.models import Settings

HA_URL = "home_assistant_url"
POLL_INTERVAL = "poll_interval_ms"
DEVICE_TIMEOUT = "device_timeout_ms"
BINARY_SENSORS = "binary_sensors"

STATES = ("on", "off")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_url(config: Mapping[str, Any]) -> None:
    if HA_URL not in config:
        raise ConfigError(
            f'Configuration is missing the "{HA_URL}" entry.', ExitCode.MISSING_HA_URL
        )
    url = config[HA_URL]
    if not url or not isinstance(url, str):
        raise ConfigError(
            f'The configuration value for "{HA_URL}" is required and must be a '
            "non-empty string.",
            ExitCode.INVALID_HA_URL,
        )


def _check_poll_interval(config: Mapping[str, Any]) -> None:
    if POLL_INTERVAL not in config:
        raise ConfigError(
            f'Configuration is missing the "{POLL_INTERVAL}" entry.',
            ExitCode.MISSING_POLL_INTERVAL,
        )
    interval = config[POLL_INTERVAL]
    if not interval:
        raise ConfigError(
            f'The configuration value for "{POLL_INTERVAL}" is required and must '
            "be a positive number.",
            ExitCode.INVALID_POLL_INTERVAL,
        )
    if not _is_number(interval):
        raise ConfigError(
            f'The configuration value for "{POLL_INTERVAL}" must be a positive '
            "number.",
            ExitCode.NON_NUMERIC_POLL_INTERVAL,
        )
    if interval <= 0:
        raise ConfigError(
            f'The configuration value for "{POLL_INTERVAL}" is less than or equal '
            "to zero, but must be a positive number.",
            ExitCode.NOT_POSITIVE_POLL_INTERVAL,
        )


def _sensor_problems(name: str, sensor: Any) -> list[str]:
    prefix = f'Binary sensor configuration for "{name}"'
    if not isinstance(sensor, Mapping):
        return [f"{prefix} must be an object."]

    problems: list[str] = []
    if "default_state" not in sensor:
        problems.append(f'{prefix} is missing the "default_state" entry.')
    elif isinstance(sensor["default_state"], bool):
        # YAML 1.1 reads bare on/off as booleans
        problems.append(
            f'{prefix} has a boolean "default_state". Quote it as "on" or "off".'
        )
    elif sensor["default_state"] not in STATES:
        problems.append(
            f'{prefix} has an invalid value for the "default_state" entry. '
            'It must be one of "on" or "off".'
        )

    hosts = sensor.get("hosts")
    if "hosts" not in sensor:
        problems.append(f'{prefix} is missing the "hosts" entry.')
    elif not isinstance(hosts, list):
        problems.append(
            f'{prefix} has an invalid value for the "hosts" entry. It must be an '
            "array containing at least one host string."
        )
    elif not hosts:
        problems.append(
            f'{prefix} has an empty "hosts" entry. It must be an array with at '
            "least one host string."
        )
    else:
        for index, host in enumerate(hosts):
            if not isinstance(host, str) or not host.strip():
                problems.append(
                    f"{prefix} host entry {index} is empty. It must be a "
                    "non-empty string."
                )
    return problems


def _check_binary_sensors(config: Mapping[str, Any]) -> None:
    if BINARY_SENSORS not in config:
        raise ConfigError(
            f'Configuration is missing the "{BINARY_SENSORS}" entry.',
            ExitCode.MISSING_BINARY_SENSORS,
        )
    sensors = config[BINARY_SENSORS]
    if not sensors:
        raise ConfigError(
            f'The configuration value for "{BINARY_SENSORS}" is empty. It must '
            "contain at least one key.",
            ExitCode.EMPTY_BINARY_SENSORS,
        )
    if not isinstance(sensors, Mapping):
        raise ConfigError(
            f'The configuration value for "{BINARY_SENSORS}" must be an object '
            "mapping sensor names to sensor configurations.",
            ExitCode.INVALID_BINARY_SENSORS,
        )

    problems: list[str] = []
    for name, sensor in sensors.items():
        problems.extend(_sensor_problems(str(name), sensor))
    if problems:
        raise ConfigError("\n".join(problems), ExitCode.INVALID_BINARY_SENSORS)


def _check_device_timeout(config: Mapping[str, Any]) -> None:
    if DEVICE_TIMEOUT not in config:
        return
    timeout = config[DEVICE_TIMEOUT]
    if not _is_number(timeout):
        raise ConfigError(
            f'The configuration value for "{DEVICE_TIMEOUT}" must be a positive '
            "number.",
            ExitCode.NON_NUMERIC_DEVICE_TIMEOUT,
        )
    if timeout <= 0:
        raise ConfigError(
            f'The configuration value for "{DEVICE_TIMEOUT}" is less than or equal '
            "to zero, but must be a positive number.",
            ExitCode.NOT_POSITIVE_DEVICE_TIMEOUT,
        )


def validate_document(data: Any, source: str = "configuration") -> Settings:
    """Turn a parsed configuration document into Settings or raise ConfigError."""
    if not isinstance(data, Mapping) or not data:
        raise ConfigError(
            f'Configuration must be an object with the keys "{HA_URL}", '
            f'"{POLL_INTERVAL}", and "{BINARY_SENSORS}".',
            ExitCode.CONFIGURATION_INVALID,
        )

    _check_url(data)
    _check_poll_interval(data)
    _check_binary_sensors(data)
    _check_device_timeout(data)

    try:
        return Settings.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(
            f"Invalid {source}:\n{exc}", ExitCode.CONFIGURATION_INVALID
        ) from exc
