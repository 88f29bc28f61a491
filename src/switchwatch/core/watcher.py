from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable, Mapping, Sequence
from functools import partial
from types import MappingProxyType

import httpx

from switchwatch.core.connectivity import ConnectivityTracker
from switchwatch.core.device import SwitchDevice, open_esphome_switch
from switchwatch.core.group import BinarySensor
from switchwatch.core.publisher import HomeAssistantClient, SensorPublisher
from switchwatch.errors import DeviceUnreachable, DuplicateGroupName
from switchwatch.models import Settings, SwitchState

logger = logging.getLogger(__name__)

Opener = Callable[[str], Awaitable[SwitchDevice]]


class Watcher:
    """Registry of binary sensors plus the timer that polls them."""

    def __init__(
        self,
        publisher: SensorPublisher,
        opener: Opener,
        tracker: ConnectivityTracker | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._publisher = publisher
        self._opener = opener
        self._logger = logger or logging.getLogger(__name__)
        self._tracker = tracker or ConnectivityTracker(self._logger)
        self._sensors: dict[str, BinarySensor] = {}
        self._ticks: set[asyncio.Task[None]] = set()
        self._stop = asyncio.Event()

    @property
    def sensors(self) -> Mapping[str, BinarySensor]:
        return MappingProxyType(self._sensors)

    @property
    def tracker(self) -> ConnectivityTracker:
        return self._tracker

    @property
    def in_flight(self) -> int:
        return len(self._ticks)

    def get(self, name: str) -> BinarySensor | None:
        return self._sensors.get(name)

    async def _open_all(self, hosts: Sequence[str]) -> list[SwitchDevice]:
        results = await asyncio.gather(
            *(self._opener(host) for host in hosts), return_exceptions=True
        )
        devices: list[SwitchDevice] = []
        failures: list[DeviceUnreachable] = []
        for host, result in zip(hosts, results):
            if isinstance(result, DeviceUnreachable):
                self._tracker.record_attempt(host, False, result)
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                devices.append(result)
        if failures:
            raise DeviceUnreachable.aggregate(failures)
        return devices

    async def add_group(
        self, name: str, hosts: Sequence[str], default_state: SwitchState
    ) -> BinarySensor:
        if name in self._sensors:
            raise DuplicateGroupName(name)

        devices = await self._open_all(hosts)
        sensor = BinarySensor(
            name,
            devices,
            default_state,
            self._publisher,
            self._tracker,
            logger=self._logger,
        )
        await sensor.initialize()

        # add_group may have been awaited twice for the same name
        if name in self._sensors:
            raise DuplicateGroupName(name)
        self._sensors[name] = sensor
        self._logger.info("Watching %s (%d switch(es))", name, len(devices))
        return sensor

    async def check_all_and_update(self) -> None:
        sensors = list(self._sensors.values())
        results = await asyncio.gather(
            *(sensor.check_and_update() for sensor in sensors),
            return_exceptions=True,
        )
        for sensor, result in zip(sensors, results):
            if isinstance(result, Exception):
                self._logger.error(
                    "%s: poll failed: %s", sensor.name, result, exc_info=result
                )

    def _spawn_tick(self) -> None:
        task = asyncio.create_task(
            self.check_all_and_update(), name="switchwatch-tick"
        )
        self._ticks.add(task)
        task.add_done_callback(self._ticks.discard)

    async def run(self, interval: float) -> None:
        """Poll all sensors every `interval` seconds until stop() is called.

        Ticks are started on a fixed schedule whether or not the previous
        tick has finished. A sensor whose previous tick is still reading
        skips the new one.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")

        self._stop.clear()
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + interval
        self._logger.info(
            "Polling %d binary sensor(s) every %.3fs", len(self._sensors), interval
        )

        while not self._stop.is_set():
            try:
                await asyncio.wait_for(
                    self._stop.wait(), timeout=max(0.0, next_tick - loop.time())
                )
            except asyncio.TimeoutError:
                pass
            else:
                break

            self._spawn_tick()
            next_tick += interval
            if next_tick < loop.time():
                next_tick = loop.time() + interval

        if self._ticks:
            await asyncio.gather(*self._ticks, return_exceptions=True)
        self._logger.info("Watcher stopped")

    def stop(self) -> None:
        self._stop.set()


async def register_groups(watcher: Watcher, settings: Settings) -> None:
    """Add every configured sensor in order; the first failure aborts."""
    for name, sensor_config in settings.binary_sensors.items():
        await watcher.add_group(name, sensor_config.hosts, sensor_config.default)


STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _stop_on_signals(watcher: Watcher) -> list[signal.Signals]:
    loop = asyncio.get_running_loop()
    installed = []
    for sig in STOP_SIGNALS:
        try:
            loop.add_signal_handler(sig, watcher.stop)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            logger.debug("Cannot install a handler for %s", sig.name)
        else:
            installed.append(sig)
    return installed


async def run_watcher(
    settings: Settings,
    token: str,
    *,
    opener: Opener | None = None,
    client: httpx.AsyncClient | None = None,
) -> None:
    """Register every configured sensor, then poll until SIGINT or SIGTERM."""
    if opener is None:
        opener = partial(
            open_esphome_switch,
            config=settings.device,
            timeout=settings.device_timeout,
        )

    async with HomeAssistantClient(
        settings.home_assistant_url, token, client=client
    ) as hub:
        watcher = Watcher(SensorPublisher(hub), opener)
        await register_groups(watcher, settings)
        installed = _stop_on_signals(watcher)
        try:
            await watcher.run(settings.poll_interval)
        finally:
            loop = asyncio.get_running_loop()
            for sig in installed:
                loop.remove_signal_handler(sig)
