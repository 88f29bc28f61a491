"""switchwatch - mirror groups of ESPHome switches into Home Assistant sensors."""

from __future__ import annotations

from importlib.metadata import version

from .config import load_settings, read_token
from .core import BinarySensor, ConnectivityTracker, SensorPublisher, Watcher
from .errors import (
    ConfigError,
    DeviceUnreachable,
    DuplicateGroupName,
    ExitCode,
    RemoteUnreachable,
)
from .models import Settings, SwitchState

__all__ = [
    "BinarySensor",
    "ConfigError",
    "ConnectivityTracker",
    "DeviceUnreachable",
    "DuplicateGroupName",
    "ExitCode",
    "RemoteUnreachable",
    "SensorPublisher",
    "Settings",
    "SwitchState",
    "Watcher",
    "__version__",
    "load_settings",
    "read_token",
]

__version__ = version("switchwatch")
