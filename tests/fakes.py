"""In-memory stand-ins for switches and Home Assistant."""

from __future__ import annotations

import asyncio

from switchwatch.errors import DeviceUnreachable, RemoteUnreachable
from switchwatch.models import SwitchState


class FakeSwitch:
    """Returns queued readings; the last one repeats once the queue runs dry.

    A reading may be a bool or an exception instance to raise.
    """

    def __init__(
        self, host: str, *readings: bool | BaseException, delay: float = 0.0
    ) -> None:
        self.host = host
        self._readings: list[bool | BaseException] = list(readings) or [False]
        self._delay = delay
        self.reads = 0
        self._active = 0
        self.max_concurrent = 0

    async def read_state(self) -> bool:
        self.reads += 1
        self._active += 1
        self.max_concurrent = max(self.max_concurrent, self._active)
        try:
            await asyncio.sleep(self._delay)
            if len(self._readings) > 1:
                reading = self._readings.pop(0)
            else:
                reading = self._readings[0]
            if isinstance(reading, BaseException):
                raise reading
            return reading
        finally:
            self._active -= 1


def unreachable(host: str) -> DeviceUnreachable:
    return DeviceUnreachable(host, "timed out")


class FakeHub:
    def __init__(self) -> None:
        self.calls: list[tuple[str, SwitchState]] = []
        self.fail = False

    async def set_state(self, sensor_name: str, state: SwitchState) -> None:
        await asyncio.sleep(0)
        self.calls.append((sensor_name, state))
        if self.fail:
            raise RemoteUnreachable(
                f"binary_sensor.{sensor_name}", "unexpected status 500", 500
            )

    def states(self, sensor_name: str) -> list[str]:
        return [state.value for name, state in self.calls if name == sensor_name]


def opener_for(switches: list[FakeSwitch]):
    by_host = {switch.host: switch for switch in switches}

    async def _open(host: str) -> FakeSwitch:
        await asyncio.sleep(0)
        found = by_host.get(host)
        if found is None:
            raise DeviceUnreachable(host, "connection refused")
        return found

    return _open
