from __future__ import annotations

import json

import pytest

from switchwatch.config import CONFIG_ENV_VAR


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv("LOGLEVEL", raising=False)
    yield


@pytest.fixture
def config_document() -> dict:
    return {
        "home_assistant_url": "http://homeassistant.local:8123",
        "poll_interval_ms": 500,
        "binary_sensors": {
            "study_lights": {
                "hosts": ["study-1.local", "study-2.local", "192.168.1.42"],
                "default_state": "off",
            },
            "hall": {"hosts": ["hall.local"], "default_state": "on"},
        },
    }


@pytest.fixture
def config_file(tmp_path, config_document):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_document))
    return path


@pytest.fixture
def token_file(tmp_path):
    path = tmp_path / "token"
    path.write_text("  long-lived-token\n")
    return path
