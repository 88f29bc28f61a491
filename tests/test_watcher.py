from __future__ import annotations

import asyncio
import logging
import signal
import sys

import httpx
import pytest
from fakes import FakeHub, FakeSwitch, opener_for, unreachable

from switchwatch.config import validate_document
from switchwatch.core import SensorPublisher, Watcher, register_groups, run_watcher
from switchwatch.errors import DeviceUnreachable, DuplicateGroupName
from switchwatch.models import SwitchState

ON = SwitchState.ON
OFF = SwitchState.OFF


def _watcher(switches, hub=None) -> Watcher:
    return Watcher(SensorPublisher(hub or FakeHub()), opener_for(switches))


async def _until(predicate, timeout: float = 2.0) -> None:
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)


def test_add_group_registers_initialized_sensor():
    hub = FakeHub()
    watcher = _watcher([FakeSwitch("a", True), FakeSwitch("b", True)], hub)

    sensor = asyncio.run(watcher.add_group("hall", ["a", "b"], OFF))

    assert watcher.get("hall") is sensor
    assert list(watcher.sensors) == ["hall"]
    assert sensor.state is ON
    assert sensor.hosts == ["a", "b"]
    assert hub.calls == [("hall", ON)]


def test_duplicate_name_is_rejected_before_io():
    switch = FakeSwitch("a", True)
    watcher = _watcher([switch])

    async def scenario():
        await watcher.add_group("hall", ["a"], ON)
        await watcher.add_group("hall", ["a"], ON)

    with pytest.raises(DuplicateGroupName):
        asyncio.run(scenario())

    assert switch.reads == 1


def test_open_failure_aborts_add_group():
    watcher = _watcher([FakeSwitch("a", True)])

    with pytest.raises(DeviceUnreachable) as excinfo:
        asyncio.run(watcher.add_group("hall", ["a", "missing-1", "missing-2"], ON))

    assert excinfo.value.host == "missing-1, missing-2"
    assert watcher.get("hall") is None
    assert not watcher.tracker.is_reachable("missing-1")


def test_read_failure_at_startup_aborts_add_group():
    watcher = _watcher([FakeSwitch("a", True), FakeSwitch("b", unreachable("b"))])

    with pytest.raises(DeviceUnreachable):
        asyncio.run(watcher.add_group("hall", ["a", "b"], ON))

    assert watcher.get("hall") is None


def test_check_all_and_update_polls_every_group():
    hub = FakeHub()
    switches = [
        FakeSwitch("a", False, True),
        FakeSwitch("b", True, True),
        FakeSwitch("c", True, False),
    ]
    watcher = _watcher(switches, hub)

    async def scenario():
        await watcher.add_group("study", ["a"], OFF)
        await watcher.add_group("hall", ["b", "c"], OFF)
        await watcher.check_all_and_update()

    asyncio.run(scenario())

    assert hub.states("study") == ["off", "on"]
    assert hub.states("hall") == ["on", "off"]


def test_one_failing_group_does_not_stop_the_others(caplog, monkeypatch):
    caplog.set_level(logging.ERROR, logger="switchwatch")
    hub = FakeHub()
    watcher = _watcher([FakeSwitch("a", False), FakeSwitch("b", False, True)], hub)

    async def scenario():
        broken = await watcher.add_group("broken", ["a"], OFF)
        await watcher.add_group("hall", ["b"], OFF)

        async def _explode():
            raise RuntimeError("boom")

        monkeypatch.setattr(broken, "check_and_update", _explode)
        await watcher.check_all_and_update()

    asyncio.run(scenario())

    assert hub.states("hall") == ["off", "on"]
    assert "broken: poll failed: boom" in caplog.text


def test_run_ticks_until_stopped():
    switch = FakeSwitch("a", False)
    watcher = _watcher([switch])

    async def scenario():
        await watcher.add_group("hall", ["a"], OFF)
        task = asyncio.create_task(watcher.run(0.01))
        await _until(lambda: switch.reads >= 4)
        watcher.stop()
        await asyncio.wait_for(task, 1.0)

    asyncio.run(scenario())

    assert watcher.in_flight == 0


def test_run_rejects_non_positive_interval():
    watcher = _watcher([])

    with pytest.raises(ValueError):
        asyncio.run(watcher.run(0))


def test_slow_member_does_not_build_a_backlog():
    switch = FakeSwitch("a", False, delay=0.1)
    watcher = _watcher([switch])
    samples: list[int] = []

    async def scenario():
        await watcher.add_group("hall", ["a"], OFF)
        task = asyncio.create_task(watcher.run(0.01))
        for _ in range(8):
            await asyncio.sleep(0.05)
            samples.append(watcher.in_flight)
        watcher.stop()
        await asyncio.wait_for(task, 1.0)

    asyncio.run(scenario())

    assert max(samples) <= 3
    assert switch.max_concurrent == 1
    assert 2 <= switch.reads <= 8
    assert watcher.in_flight == 0


def test_register_groups_follows_configuration_order(config_document):
    settings = validate_document(config_document)
    switches = [
        FakeSwitch("study-1.local", True),
        FakeSwitch("study-2.local", False),
        FakeSwitch("192.168.1.42", False),
        FakeSwitch("hall.local", True),
    ]
    hub = FakeHub()
    watcher = _watcher(switches, hub)

    asyncio.run(register_groups(watcher, settings))

    assert list(watcher.sensors) == ["study_lights", "hall"]
    assert hub.calls == [("study_lights", OFF), ("hall", ON)]


def test_register_groups_stops_at_first_failure(config_document):
    settings = validate_document(config_document)
    hall = FakeSwitch("hall.local", True)
    watcher = _watcher([FakeSwitch("study-1.local", True), hall])

    with pytest.raises(DeviceUnreachable):
        asyncio.run(register_groups(watcher, settings))

    assert dict(watcher.sensors) == {}
    assert hall.reads == 0


def test_run_watcher_reports_startup_failure(config_document):
    settings = validate_document(config_document)
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    opener = opener_for([FakeSwitch("study-1.local", True)])

    with pytest.raises(DeviceUnreachable):
        asyncio.run(run_watcher(settings, "token", opener=opener, client=client))

    assert requests == []
    assert client.is_closed


@pytest.mark.skipif(sys.platform == "win32", reason="needs loop signal handlers")
def test_run_watcher_stops_on_interrupt(config_document):
    settings = validate_document(config_document)
    switches = [
        FakeSwitch("study-1.local", False),
        FakeSwitch("study-2.local", False),
        FakeSwitch("192.168.1.42", False),
        FakeSwitch("hall.local", True),
    ]
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200))
    )

    async def scenario():
        task = asyncio.create_task(
            run_watcher(settings, "token", opener=opener_for(switches), client=client)
        )
        await _until(lambda: switches[-1].reads >= 3)
        signal.raise_signal(signal.SIGINT)
        await asyncio.wait_for(task, 2.0)

    asyncio.run(scenario())

    assert client.is_closed
