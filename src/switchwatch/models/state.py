from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from enum import Enum


class SwitchState(str, Enum):
    ON = "on"
    OFF = "off"
    # Per-read sentinel, never an aggregate or published state
    DISCONNECTED = "disconnected"

    @classmethod
    def from_relay(cls, relay_on: bool) -> SwitchState:
        return cls.ON if relay_on else cls.OFF

    @property
    def opposite(self) -> SwitchState:
        if self is SwitchState.ON:
            return SwitchState.OFF
        if self is SwitchState.OFF:
            return SwitchState.ON
        raise ValueError("DISCONNECTED has no opposite state")


def initial_state(
    readings: Iterable[SwitchState], default: SwitchState
) -> SwitchState:
    """Majority vote over live readings.

    The default state wins ties; the other state wins only when it was
    read strictly more often. DISCONNECTED readings are ignored.
    """
    other = default.opposite
    tally = Counter(
        reading for reading in readings if reading is not SwitchState.DISCONNECTED
    )
    if tally[default] >= tally[other]:
        return default
    return other
