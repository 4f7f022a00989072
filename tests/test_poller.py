"""Tests for the telemetry Poller and its MountToken."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock

import pytest

from fanpanel.domain.telemetry import ViewModel
from fanpanel.services.poller import MountToken, Poller
from fanpanel.sources.base import ServiceRegistry, StatusSource, TemperatureSensor

SERVICE = "argon_daemon"


# ── Fakes ────────────────────────────────────────────────────────────────────

class FakeRegistry(ServiceRegistry):
    def __init__(self, running: bool = True, error: Exception | None = None) -> None:
        self.running = running
        self.error = error

    async def query(self, service_name: str) -> dict[str, Any]:
        if self.error:
            raise self.error
        if not self.running:
            return {}
        return {service_name: {"instances": {"instance1": {"running": True}}}}


class FakeStatus(StatusSource):
    def __init__(self, temps: list[int | None]) -> None:
        self.temps = list(temps)

    async def read(self) -> str | None:
        temp = self.temps.pop(0) if len(self.temps) > 1 else self.temps[0]
        return json.dumps({"mode": "auto", "level": 1, "active_speed": 10, "temp": temp, "uptime": 30})


class FakeSensor(TemperatureSensor):
    def __init__(self, reading: str = "0", error: Exception | None = None) -> None:
        self.reading = reading
        self.error = error

    async def read(self) -> str:
        if self.error:
            raise self.error
        return self.reading


class Collector:
    def __init__(self) -> None:
        self.views: list[ViewModel] = []
        self.arrived = asyncio.Event()
        self.wanted = 1

    async def __call__(self, view: ViewModel) -> None:
        self.views.append(view)
        if len(self.views) >= self.wanted:
            self.arrived.set()


def _poller(
    publish,
    registry: ServiceRegistry | None = None,
    status: StatusSource | None = None,
    sensor: TemperatureSensor | None = None,
    **kwargs,
) -> Poller:
    return Poller(
        registry or FakeRegistry(),
        status or FakeStatus([50]),
        sensor or FakeSensor(),
        publish,
        service_name=SERVICE,
        **kwargs,
    )


# ── Tick ─────────────────────────────────────────────────────────────────────

class TestTick:
    @pytest.mark.asyncio
    async def test_publishes_reduced_view(self) -> None:
        collect = Collector()
        view = await _poller(collect).tick()
        assert view is not None
        assert view.running is True
        assert view.temperature_c == 50
        assert view.speed_label == "10% (Quiet)"
        assert collect.views == [view]

    @pytest.mark.asyncio
    async def test_publisher_awaited_once_per_tick(self) -> None:
        publish = AsyncMock()
        poller = _poller(publish)
        view = await poller.tick()
        publish.assert_awaited_once_with(view)

    @pytest.mark.asyncio
    async def test_history_grows_with_known_temperatures(self) -> None:
        poller = _poller(Collector(), status=FakeStatus([50, 52, 55, 55]))
        for _ in range(3):
            await poller.tick()
        assert [s.temperature_c for s in poller.history()] == [50, 52, 55]
        assert [s.ordinal for s in poller.history()] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_history_bounded_by_capacity(self) -> None:
        poller = _poller(Collector(), status=FakeStatus([40, 41, 42, 43, 44, 45]), capacity=3)
        for _ in range(5):
            await poller.tick()
        assert [s.temperature_c for s in poller.history()] == [42, 43, 44]

    @pytest.mark.asyncio
    async def test_sparkline_after_second_sample(self) -> None:
        poller = _poller(Collector(), status=FakeStatus([50, 60]))
        first = await poller.tick()
        second = await poller.tick()
        assert first.sparkline == ""
        assert second.sparkline.startswith("<svg")

    @pytest.mark.asyncio
    async def test_unknown_temperature_not_recorded(self) -> None:
        poller = _poller(Collector(), status=FakeStatus([None]), sensor=FakeSensor("0"))
        view = await poller.tick()
        assert view.temperature_c is None
        assert poller.history() == []

    @pytest.mark.asyncio
    async def test_sensor_fallback_used(self) -> None:
        poller = _poller(Collector(), status=FakeStatus([None]), sensor=FakeSensor("47500"))
        view = await poller.tick()
        assert view.temperature_c == 47

    @pytest.mark.asyncio
    async def test_failing_sources_degrade_view(self) -> None:
        poller = _poller(
            Collector(),
            registry=FakeRegistry(error=RuntimeError("ubus gone")),
            sensor=FakeSensor(error=OSError("no zone")),
        )
        view = await poller.tick()
        assert view.running is False
        assert view.status_label == "Stopped"

    @pytest.mark.asyncio
    async def test_offline_service(self) -> None:
        view = await _poller(Collector(), registry=FakeRegistry(running=False)).tick()
        assert view.running is False
        assert view.speed_label == "Offline"

    @pytest.mark.asyncio
    async def test_results_discarded_after_unmount(self) -> None:
        collect = Collector()
        poller = _poller(collect)
        poller.token.unmount()
        assert await poller.tick() is None
        assert collect.views == []
        assert poller.history() == []

    @pytest.mark.asyncio
    async def test_publish_failure_unmounts(self) -> None:
        async def broken(view: ViewModel) -> None:
            raise ConnectionError("socket closed")

        poller = _poller(broken)
        assert await poller.tick() is None
        assert poller.token.mounted is False


# ── Lifecycle ────────────────────────────────────────────────────────────────

class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_polls_until_stopped(self) -> None:
        collect = Collector()
        collect.wanted = 3
        poller = _poller(collect, status=FakeStatus([50, 51, 52, 53]), interval=0.01)

        token = poller.start()
        await asyncio.wait_for(collect.arrived.wait(), timeout=2.0)
        assert poller.running
        assert token.mounted

        await poller.stop()
        assert not poller.running
        assert not token.mounted
        assert poller.history() == []

    @pytest.mark.asyncio
    async def test_unmount_wakes_long_wait(self) -> None:
        collect = Collector()
        poller = _poller(collect, interval=60.0)
        poller.start()
        await asyncio.wait_for(collect.arrived.wait(), timeout=2.0)

        await asyncio.wait_for(poller.stop(), timeout=2.0)
        assert len(collect.views) == 1

    @pytest.mark.asyncio
    async def test_double_start_rejected(self) -> None:
        poller = _poller(Collector(), interval=60.0)
        poller.start()
        with pytest.raises(RuntimeError):
            poller.start()
        await poller.stop()

    @pytest.mark.asyncio
    async def test_tick_error_keeps_polling(self) -> None:
        collect = Collector()
        collect.wanted = 2
        poller = _poller(collect, interval=0.01)
        original = poller.tick
        calls = 0

        async def flaky():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("boom")
            return await original()

        poller.tick = flaky
        poller.start()
        await asyncio.wait_for(collect.arrived.wait(), timeout=2.0)
        await poller.stop()
        assert calls >= 3


class TestMountToken:
    @pytest.mark.asyncio
    async def test_wait_times_out_while_mounted(self) -> None:
        token = MountToken()
        assert await token.wait_unmounted(0.01) is False
        assert token.mounted

    @pytest.mark.asyncio
    async def test_wait_returns_once_unmounted(self) -> None:
        token = MountToken()
        token.unmount()
        assert await token.wait_unmounted(10.0) is True
