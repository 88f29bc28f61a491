from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from switchwatch.errors import DeviceUnreachable


class ConnectivityEvent(str, Enum):
    DISCONNECTED = "disconnected"
    RECONNECTED = "reconnected"


class ConnectivityTracker:
    """Remembers whether each host answered its last read.

    Only edges are reported, so a device that stays offline is logged
    once instead of on every poll. The tracker never influences the
    aggregate state of a sensor.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._reachable: dict[str, bool] = {}

    @property
    def hosts(self) -> Mapping[str, bool]:
        return MappingProxyType(self._reachable)

    def is_reachable(self, host: str) -> bool:
        return self._reachable.get(host, True)

    def record_attempt(
        self, host: str, succeeded: bool, error: BaseException | None = None
    ) -> ConnectivityEvent | None:
        previous = self.is_reachable(host)
        self._reachable[host] = succeeded

        detail = _describe(error)
        if previous and not succeeded:
            if detail:
                self._logger.warning("Could not connect to %s: %s", host, detail)
            else:
                self._logger.warning("Could not connect to %s", host)
            return ConnectivityEvent.DISCONNECTED

        if not previous and succeeded:
            self._logger.info("Reconnected to %s", host)
            return ConnectivityEvent.RECONNECTED

        if not succeeded:
            self._logger.debug("%s still unreachable: %s", host, detail)
        return None


def _describe(error: BaseException | None) -> str:
    if error is None:
        return ""
    if isinstance(error, DeviceUnreachable) and error.reason:
        return error.reason
    return str(error)
