from __future__ import annotations

from .connectivity import ConnectivityEvent, ConnectivityTracker
from .device import (
    ESPHomeSwitch,
    SwitchDevice,
    open_esphome_switch,
    read_switch_state,
)
from .group import BinarySensor
from .publisher import HomeAssistantClient, SensorPublisher
from .watcher import Watcher, register_groups, run_watcher

__all__ = [
    "BinarySensor",
    "ConnectivityEvent",
    "ConnectivityTracker",
    "ESPHomeSwitch",
    "HomeAssistantClient",
    "SensorPublisher",
    "SwitchDevice",
    "Watcher",
    "open_esphome_switch",
    "read_switch_state",
    "register_groups",
    "run_watcher",
]
