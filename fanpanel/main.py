"""fanpanel: control surface for the Argon ONE V3 fan daemon.

This is the application entry point.  It wires the config store, staging
area, validator, codec, presets, operator actions, telemetry pollers and
HTTP/WebSocket endpoints together.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from fanpanel.api.actions import create_actions_router
from fanpanel.api.config import create_config_router
from fanpanel.api.ws_telemetry import TelemetryViews, create_telemetry_router
from fanpanel.config import settings
from fanpanel.core.codec import ImportExportCodec
from fanpanel.core.presets import PresetEngine
from fanpanel.core.validator import ConfigValidator
from fanpanel.domain.enums import ScriptKind
from fanpanel.services.actions import ActionGuard, ConfirmationBook, ScriptRunner
from fanpanel.services.poller import Poller, ViewPublisher
from fanpanel.services.releases import ReleaseChecker
from fanpanel.sources.status_file import StatusFileSource
from fanpanel.sources.thermal import ThermalZoneSensor
from fanpanel.sources.ubus import UbusServiceRegistry
from fanpanel.store.config_store import JsonConfigStore
from fanpanel.store.staging import StagingArea

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

# ── Configuration ────────────────────────────────────────────────────────────

validator = ConfigValidator()
store = JsonConfigStore(settings.config_path)
staging = StagingArea(store, validator)
codec = ImportExportCodec(store, staging, validator, version=settings.version)
presets = PresetEngine(staging)

# ── Operator actions ─────────────────────────────────────────────────────────

guard = ActionGuard(cooldown=settings.action_cooldown_seconds)
confirmations = ConfirmationBook(ttl=settings.confirmation_ttl_seconds)
runner = ScriptRunner({
    ScriptKind.FAN_TEST: (settings.fan_test_script,),
    ScriptKind.RESTART: (settings.service_script, "restart"),
    ScriptKind.UPDATE: (settings.update_script,),
})
releases = ReleaseChecker(
    settings.release_url,
    installed_version=settings.version,
    timeout=settings.http_timeout_seconds,
)

# ── Telemetry ────────────────────────────────────────────────────────────────

registry = UbusServiceRegistry()
status_source = StatusFileSource(settings.status_path)
sensor = ThermalZoneSensor(settings.thermal_paths)


def make_poller(publish: ViewPublisher) -> Poller:
    return Poller(
        registry,
        status_source,
        sensor,
        publish,
        service_name=settings.service_name,
        interval=settings.poll_interval_seconds,
        capacity=settings.history_capacity,
    )


views = TelemetryViews(make_poller)

# ── App ──────────────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    description="Argon ONE V3 fan control: live telemetry, configuration and actions",
    version=settings.version,
)

# ── Routes ───────────────────────────────────────────────────────────────────

app.include_router(create_telemetry_router(views))
app.include_router(create_config_router(store, staging, validator, codec, guard))
app.include_router(create_actions_router(presets, staging, runner, confirmations, releases, guard))


# ── Health ───────────────────────────────────────────────────────────────────

@app.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "version": settings.version,
        "mounted_views": views.view_count,
        "staged_changes": len(staging.staged),
        "pending_confirmations": confirmations.pending_count,
    }
