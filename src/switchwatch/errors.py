"""Exceptions and process exit codes."""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum


class ExitCode(IntEnum):
    OK = 0
    INVALID_CLI_ARGS = 2
    CANNOT_READ_TOKEN_FILE = 3
    CANNOT_READ_CONFIG_FILE = 4
    CANNOT_PARSE_CONFIG_FILE = 5
    CONFIGURATION_INVALID = 6
    MISSING_HA_URL = 7
    INVALID_HA_URL = 8
    MISSING_POLL_INTERVAL = 9
    INVALID_POLL_INTERVAL = 10
    NON_NUMERIC_POLL_INTERVAL = 11
    NOT_POSITIVE_POLL_INTERVAL = 12
    MISSING_BINARY_SENSORS = 13
    EMPTY_BINARY_SENSORS = 14
    INVALID_BINARY_SENSORS = 15
    NON_NUMERIC_DEVICE_TIMEOUT = 16
    NOT_POSITIVE_DEVICE_TIMEOUT = 17
    STARTUP_FAILED = 18

    @property
    def description(self) -> str:
        return self.name.replace("_", " ").capitalize()


class SwitchWatchError(Exception):
    """Base class for all switchwatch errors."""


class DeviceUnreachable(SwitchWatchError):
    """A switch could not be connected to or did not answer in time."""

    def __init__(self, host: str, reason: str = "") -> None:
        self.host = host
        self.reason = reason
        message = f"Could not reach device {host}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    @classmethod
    def aggregate(cls, errors: Sequence[DeviceUnreachable]) -> DeviceUnreachable:
        if len(errors) == 1:
            return errors[0]
        hosts = ", ".join(error.host for error in errors)
        reasons = "; ".join(f"{error.host}: {error.reason}" for error in errors)
        return cls(hosts, reasons)


class SwitchNotFound(DeviceUnreachable):
    """The device answered but exposes no matching switch entity."""


class RemoteUnreachable(SwitchWatchError):
    """Home Assistant rejected a state update or could not be reached."""

    def __init__(
        self, entity_id: str, reason: str = "", status_code: int | None = None
    ) -> None:
        self.entity_id = entity_id
        self.reason = reason
        self.status_code = status_code
        message = f"Could not update {entity_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DuplicateGroupName(SwitchWatchError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Binary sensor '{name}' is already registered")


class ConfigError(SwitchWatchError):
    """Invalid command line input, token file or configuration file."""

    def __init__(self, message: str, exit_code: ExitCode) -> None:
        self.exit_code = exit_code
        super().__init__(message)
