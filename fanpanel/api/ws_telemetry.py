"""Telemetry WebSocket: one mounted dashboard view per connection.

Path: /ws/telemetry

Each connection mounts a view with its own Poller (and so its own
temperature history).  The poller pushes every tick's ViewModel:

    {"type": "telemetry", "view": {...}}

Clients may send "ping" and get "pong".  Disconnecting unmounts the view,
which stops its poller and drops its history.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from fanpanel.domain.telemetry import ViewModel
from fanpanel.services.poller import Poller, ViewPublisher

logger = logging.getLogger(__name__)

PollerFactory = Callable[[ViewPublisher], Poller]


class TelemetryViews:
    """Tracks mounted views and the poller serving each of them."""

    def __init__(self, poller_factory: PollerFactory) -> None:
        self._poller_factory = poller_factory
        self._views: dict[WebSocket, Poller] = {}

    async def mount(self, ws: WebSocket) -> Poller:
        await ws.accept()

        async def publish(view: ViewModel) -> None:
            await ws.send_json({"type": "telemetry", "view": view.model_dump(mode="json")})

        poller = self._poller_factory(publish)
        self._views[ws] = poller
        poller.start()
        logger.info("Telemetry view mounted (%d total)", len(self._views))
        return poller

    async def unmount(self, ws: WebSocket) -> None:
        poller = self._views.pop(ws, None)
        if poller is not None:
            await poller.stop()
        logger.info("Telemetry view unmounted (%d remaining)", len(self._views))

    @property
    def view_count(self) -> int:
        return len(self._views)


def create_telemetry_router(views: TelemetryViews) -> APIRouter:
    """Factory that creates the telemetry WebSocket endpoint."""

    router = APIRouter()

    @router.websocket("/ws/telemetry")
    async def telemetry_ws(websocket: WebSocket) -> None:
        await views.mount(websocket)
        try:
            while True:
                data = await websocket.receive_text()
                if data.strip().lower() == "ping":
                    await websocket.send_text("pong")
        except WebSocketDisconnect:
            pass
        finally:
            await views.unmount(websocket)

    return router
