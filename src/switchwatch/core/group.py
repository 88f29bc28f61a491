from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence

from switchwatch.core.connectivity import ConnectivityTracker
from switchwatch.core.device import SwitchDevice, read_switch_state
from switchwatch.core.publisher import SensorPublisher, entity_id
from switchwatch.errors import DeviceUnreachable, RemoteUnreachable
from switchwatch.models import SwitchState, initial_state


class BinarySensor:
    """A group of switches reported to Home Assistant as one binary sensor.

    The initial state is a majority vote across all members, with the
    configured default winning ties. After that a single member seen in
    the opposite state is enough to flip the sensor.
    """

    def __init__(
        self,
        name: str,
        devices: Sequence[SwitchDevice],
        default_state: SwitchState,
        publisher: SensorPublisher,
        tracker: ConnectivityTracker,
        logger: logging.Logger | None = None,
    ) -> None:
        if default_state is SwitchState.DISCONNECTED:
            raise ValueError("default state must be ON or OFF")
        self.name = name
        self.default_state = default_state
        self._devices = tuple(devices)
        self._publisher = publisher
        self._tracker = tracker
        self._logger = logger or logging.getLogger(__name__)
        self._state: SwitchState | None = None
        # Held while a tick is reading; later ticks skip this sensor
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return (
            f"BinarySensor(name={self.name!r}, state={self._state}, "
            f"hosts={self.hosts})"
        )

    @property
    def state(self) -> SwitchState | None:
        return self._state

    @state.setter
    def state(self, value: SwitchState) -> None:
        if value is SwitchState.DISCONNECTED:
            raise ValueError(f"{self.name}: DISCONNECTED is not an aggregate state")
        self._state = value

    @property
    def hosts(self) -> list[str]:
        return [device.host for device in self._devices]

    @property
    def devices(self) -> tuple[SwitchDevice, ...]:
        return self._devices

    async def initialize(self) -> SwitchState:
        """Vote on the initial state and publish it unconditionally.

        Every member must answer; a single unreachable member fails the
        whole call with DeviceUnreachable.
        """
        results = await asyncio.gather(
            *(read_switch_state(device) for device in self._devices),
            return_exceptions=True,
        )

        readings: list[SwitchState] = []
        failures: list[DeviceUnreachable] = []
        for device, result in zip(self._devices, results):
            if isinstance(result, DeviceUnreachable):
                self._tracker.record_attempt(device.host, False, result)
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                self._tracker.record_attempt(device.host, True)
                readings.append(result)

        if failures:
            raise DeviceUnreachable.aggregate(failures)

        state = initial_state(readings, self.default_state)
        tally = Counter(readings)
        self._logger.info(
            "%s: initial state %s (on=%d, off=%d, default=%s)",
            entity_id(self.name),
            state.value,
            tally[SwitchState.ON],
            tally[SwitchState.OFF],
            self.default_state.value,
        )

        try:
            await self._publisher.publish(self, state, force=True)
        except RemoteUnreachable as exc:
            self._logger.error("%s", exc)
        return state

    async def check_and_update(self) -> SwitchState:
        """Poll every member once and flip if any reports the opposite state.

        A tick that arrives while the previous one is still reading is
        skipped and returns the current state.
        """
        if self._state is None:
            raise RuntimeError(f"{self.name} has not been initialized")
        if self._lock.locked():
            self._logger.debug(
                "%s: previous poll still running, skipping", entity_id(self.name)
            )
            return self._state

        target = self._state.opposite
        async with self._lock:
            await asyncio.gather(
                *(self._check_member(device, target) for device in self._devices)
            )
            return self._state

    async def _read_member(self, device: SwitchDevice) -> SwitchState:
        try:
            reading = await read_switch_state(device)
        except DeviceUnreachable as exc:
            self._tracker.record_attempt(device.host, False, exc)
            return SwitchState.DISCONNECTED
        self._tracker.record_attempt(device.host, True)
        return reading

    async def _check_member(self, device: SwitchDevice, target: SwitchState) -> None:
        reading = await self._read_member(device)
        if reading is not target:
            return

        self._logger.debug(
            "%s: %s reports %s", entity_id(self.name), device.host, reading.value
        )
        try:
            await self._publisher.publish(self, target)
        except RemoteUnreachable as exc:
            self._logger.error("%s", exc)
