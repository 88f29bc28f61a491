"""Configuration models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from switchwatch.models.state import SwitchState

DEFAULT_DEVICE_PORT = 6053
DEFAULT_DEVICE_TIMEOUT_MS = 10_000


class DeviceConfig(BaseModel):
    """ESPHome native API connection parameters shared by all switches."""

    model_config = {"frozen": True, "extra": "forbid"}

    port: int = Field(default=DEFAULT_DEVICE_PORT, ge=1, le=65535)
    password: str = ""
    noise_psk: str | None = None
    # object_id of the relay switch; first switch entity when unset
    switch: str | None = None


class BinarySensorConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    hosts: list[str] = Field(min_length=1)
    default_state: Literal["on", "off"]

    @field_validator("hosts")
    @classmethod
    def _hosts_not_blank(cls, hosts: list[str]) -> list[str]:
        if any(not host.strip() for host in hosts):
            raise ValueError("host entries must be non-empty strings")
        return hosts

    @property
    def default(self) -> SwitchState:
        return SwitchState(self.default_state)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    home_assistant_url: str = Field(min_length=1)
    poll_interval_ms: float = Field(gt=0)
    device_timeout_ms: float = Field(default=DEFAULT_DEVICE_TIMEOUT_MS, gt=0)
    binary_sensors: dict[str, BinarySensorConfig] = Field(min_length=1)
    device: DeviceConfig = Field(default_factory=DeviceConfig)

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000

    @property
    def device_timeout(self) -> float:
        """Device read timeout in seconds."""
        return self.device_timeout_ms / 1000
