from __future__ import annotations

import logging
from types import TracebackType
from typing import Protocol

import httpx

from switchwatch.errors import RemoteUnreachable
from switchwatch.models import SwitchState

logger = logging.getLogger(__name__)

ACCEPTED_STATUS = (200, 201)
DEFAULT_HUB_TIMEOUT = 10.0


def entity_id(sensor_name: str) -> str:
    return f"binary_sensor.{sensor_name}"


class HomeAssistantClient:
    """Writes binary sensor states through the Home Assistant REST API."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_HUB_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"}
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def set_state(self, sensor_name: str, state: SwitchState) -> None:
        target = entity_id(sensor_name)
        url = f"{self._base_url}/api/states/{target}"
        try:
            resp = await self._client.post(
                url, json={"state": state.value}, headers=self._headers
            )
        except httpx.HTTPError as exc:
            raise RemoteUnreachable(target, str(exc) or type(exc).__name__) from exc

        if resp.status_code not in ACCEPTED_STATUS:
            raise RemoteUnreachable(
                target,
                f"unexpected status {resp.status_code}",
                status_code=resp.status_code,
            )
        logger.debug("Home Assistant accepted %s=%s", target, state.value)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HomeAssistantClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


class Hub(Protocol):
    async def set_state(self, sensor_name: str, state: SwitchState) -> None: ...


class PublishTarget(Protocol):
    name: str
    state: SwitchState | None


class SensorPublisher:
    """Forwards aggregate state changes, skipping ones already current.

    The stored state is updated before the hub is called and is not
    rolled back when the call fails; the next successful publish brings
    Home Assistant back in line.
    """

    def __init__(self, hub: Hub, logger: logging.Logger | None = None) -> None:
        self._hub = hub
        self._logger = logger or logging.getLogger(__name__)

    async def publish(
        self, sensor: PublishTarget, new_state: SwitchState, *, force: bool = False
    ) -> bool:
        if new_state is SwitchState.DISCONNECTED:
            raise ValueError(f"cannot publish {new_state.value} for {sensor.name}")
        if not force and sensor.state is new_state:
            return False

        previous = sensor.state
        sensor.state = new_state
        self._logger.info(
            "%s: %s -> %s",
            entity_id(sensor.name),
            previous.value if previous else "unset",
            new_state.value,
        )
        await self._hub.set_state(sensor.name, new_state)
        return True
