"""Data models for switchwatch."""

from switchwatch.models.config import BinarySensorConfig, DeviceConfig, Settings
from switchwatch.models.state import SwitchState, initial_state

__all__ = [
    "BinarySensorConfig",
    "DeviceConfig",
    "Settings",
    "SwitchState",
    "initial_state",
]
