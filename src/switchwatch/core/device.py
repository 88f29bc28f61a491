from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

import aioesphomeapi

from switchwatch.errors import DeviceUnreachable, SwitchNotFound
from switchwatch.models import DeviceConfig, SwitchState

logger = logging.getLogger(__name__)

CONNECTION_ERRORS = (
    aioesphomeapi.APIConnectionError,
    aioesphomeapi.InvalidAuthAPIError,
    ConnectionError,
    OSError,
)


class SwitchDevice(Protocol):
    host: str

    async def read_state(self) -> bool: ...


class ESPHomeSwitch:
    """Relay switch on an ESPHome device, read over the native API.

    Each read opens a fresh connection so that an unreachable device
    surfaces on every poll rather than only when a long-lived
    connection drops.
    """

    def __init__(self, host: str, config: DeviceConfig, timeout: float) -> None:
        self.host = host
        self._config = config
        self._timeout = timeout
        self._key: int | None = None

    def __repr__(self) -> str:
        return f"ESPHomeSwitch(host={self.host!r}, key={self._key})"

    @property
    def key(self) -> int | None:
        return self._key

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aioesphomeapi.APIClient]:
        api = aioesphomeapi.APIClient(
            self.host,
            port=self._config.port,
            password=self._config.password,
            noise_psk=self._config.noise_psk,
        )
        try:
            await api.connect(login=True, log_errors=False)
            yield api
        finally:
            await api.disconnect()

    async def _resolve_key(self) -> int:
        async with self._connect() as api:
            entities, _services = await api.list_entities_services()

        switches = [e for e in entities if isinstance(e, aioesphomeapi.SwitchInfo)]
        wanted = self._config.switch
        for switch in switches:
            if wanted is None or switch.object_id == wanted:
                return switch.key

        if wanted is None:
            raise SwitchNotFound(self.host, "device exposes no switch entity")
        raise SwitchNotFound(self.host, f"no switch with object_id '{wanted}'")

    async def _query_state(self) -> bool:
        assert self._key is not None
        key = self._key
        loop = asyncio.get_running_loop()
        result: asyncio.Future[bool] = loop.create_future()

        def _on_state(state: aioesphomeapi.EntityState) -> None:
            if (
                isinstance(state, aioesphomeapi.SwitchState)
                and state.key == key
                and not result.done()
            ):
                result.set_result(state.state)

        async with self._connect() as api:
            api.subscribe_states(_on_state)
            return await result

    async def open(self) -> None:
        logger.debug("Opening switch at %s", self.host)
        try:
            self._key = await asyncio.wait_for(
                self._resolve_key(), timeout=self._timeout
            )
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise DeviceUnreachable(self.host, "timed out") from exc
        except CONNECTION_ERRORS as exc:
            raise DeviceUnreachable(self.host, str(exc)) from exc
        logger.debug("Resolved switch key %d on %s", self._key, self.host)

    async def read_state(self) -> bool:
        if self._key is None:
            await self.open()
        try:
            return await asyncio.wait_for(self._query_state(), timeout=self._timeout)
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise DeviceUnreachable(self.host, "timed out") from exc
        except CONNECTION_ERRORS as exc:
            raise DeviceUnreachable(self.host, str(exc)) from exc


async def open_esphome_switch(
    host: str, config: DeviceConfig, timeout: float
) -> ESPHomeSwitch:
    device = ESPHomeSwitch(host, config, timeout)
    await device.open()
    return device


async def read_switch_state(device: SwitchDevice) -> SwitchState:
    """Read one device, returning ON/OFF or raising DeviceUnreachable."""
    try:
        relay_on = await device.read_state()
    except DeviceUnreachable:
        raise
    except (asyncio.TimeoutError, TimeoutError) as exc:
        raise DeviceUnreachable(device.host, "timed out") from exc
    except CONNECTION_ERRORS as exc:
        raise DeviceUnreachable(device.host, str(exc)) from exc
    return SwitchState.from_relay(bool(relay_on))
