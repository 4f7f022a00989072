"""Poller: drives the live telemetry view of one mounted dashboard.

Each tick:
    service registry ─┐
    status file      ─┼─ gather (join) ─→ reduce ─→ history ─→ sparkline ─→ publish
    thermal zone     ─┘

Every fetch has its own default (empty registry, no status, "0"), so a
failing source degrades the view instead of aborting the tick.

Lifecycle:
    Whoever mounts the view owns a MountToken and the Poller started with
    it.  unmount() is the only way the loop ends: the token is checked at
    the start of every tick, the inter-tick wait wakes as soon as it flips,
    and a tick that completes after unmount is discarded unpublished.  On
    the way out the Poller resets its history so a later mount starts
    clean.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Awaitable, Callable

from fanpanel.core.ring_buffer import RingBuffer
from fanpanel.core.sparkline import render_sparkline
from fanpanel.core.status_reducer import reduce_status
from fanpanel.domain.telemetry import Sample, ViewModel, parse_status
from fanpanel.sources.base import (
    ServiceRegistry,
    StatusSource,
    TemperatureSensor,
    is_service_running,
)
from fanpanel.sources.thermal import FALLBACK_READING

logger = logging.getLogger(__name__)

ViewPublisher = Callable[[ViewModel], Awaitable[None]]


class MountToken:
    """Cooperative cancellation signal for a mounted view."""

    def __init__(self) -> None:
        self._unmounted = asyncio.Event()

    @property
    def mounted(self) -> bool:
        return not self._unmounted.is_set()

    def unmount(self) -> None:
        self._unmounted.set()

    async def wait_unmounted(self, timeout: float) -> bool:
        """Sleep up to *timeout* seconds; True if the view was unmounted."""
        try:
            await asyncio.wait_for(self._unmounted.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


class Poller:
    """Polls daemon state on a fixed period and publishes ViewModels.

    Args:
        registry: Service registry queried for running instances.
        status_source: Daemon status document.
        sensor: Fallback temperature sensor.
        publish: Coroutine receiving each tick's ViewModel.
        service_name: Daemon service name in the registry.
        interval: Seconds between ticks.
        capacity: Temperature history length.
        token: Mount token; a fresh one is created if omitted.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        status_source: StatusSource,
        sensor: TemperatureSensor,
        publish: ViewPublisher,
        *,
        service_name: str,
        interval: float = 3.0,
        capacity: int = 20,
        token: MountToken | None = None,
    ) -> None:
        self._registry = registry
        self._status_source = status_source
        self._sensor = sensor
        self._publish = publish
        self._service_name = service_name
        self._interval = interval
        self._token = token or MountToken()
        self._history = RingBuffer(capacity)
        self._ordinals = itertools.count()
        self._task: asyncio.Task[None] | None = None

    # ── Lifecycle ────────────────────────────────────────────────────────

    @property
    def token(self) -> MountToken:
        return self._token

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> MountToken:
        """Schedule the polling loop on the running event loop."""
        if self.running:
            raise RuntimeError("Poller already started")
        self._history.reset()
        self._task = asyncio.create_task(self._run(), name=f"poller:{self._service_name}")
        return self._token

    async def stop(self) -> None:
        """Unmount and wait for the loop to wind down."""
        self._token.unmount()
        if self._task is not None:
            await self._task

    def history(self) -> list[Sample]:
        return self._history.snapshot()

    # ── Tick ─────────────────────────────────────────────────────────────

    async def tick(self) -> ViewModel | None:
        """Run one poll cycle; returns the published ViewModel.

        Returns None when the view was unmounted while the fetches were in
        flight; their results are dropped.
        """
        snapshot, status_text, temp_raw = await asyncio.gather(
            self._query_registry(),
            self._read_status(),
            self._read_sensor(),
        )
        if not self._token.mounted:
            logger.debug("Discarding tick results after unmount")
            return None

        view = reduce_status(
            parse_status(status_text),
            is_service_running(snapshot, self._service_name),
            temp_raw,
        )
        if view.temperature_c is not None:
            self._history.push(Sample(temperature_c=view.temperature_c, ordinal=next(self._ordinals)))
        view = view.model_copy(update={"sparkline": render_sparkline(self._history.snapshot())})

        try:
            await self._publish(view)
        except Exception as exc:
            # A view that cannot be written to is gone
            logger.warning("Publishing telemetry failed, unmounting: %s", exc)
            self._token.unmount()
            return None
        return view

    # ── Internals ────────────────────────────────────────────────────────

    async def _run(self) -> None:
        logger.info("Telemetry poller started (every %.1fs)", self._interval)
        try:
            while self._token.mounted:
                try:
                    await self.tick()
                except Exception as exc:
                    logger.error("Telemetry tick failed: %s", exc, exc_info=True)
                if await self._token.wait_unmounted(self._interval):
                    break
        finally:
            self._history.reset()
            logger.info("Telemetry poller stopped")

    async def _query_registry(self) -> dict[str, Any]:
        try:
            return await self._registry.query(self._service_name)
        except Exception as exc:
            logger.debug("Service registry query failed: %s", exc)
            return {}

    async def _read_status(self) -> str | None:
        try:
            return await self._status_source.read()
        except Exception as exc:
            logger.debug("Status read failed: %s", exc)
            return None

    async def _read_sensor(self) -> str:
        try:
            return await self._sensor.read()
        except Exception as exc:
            logger.debug("Sensor read failed: %s", exc)
            return FALLBACK_READING
