"""REST endpoints for presets and operator actions.

    GET    /api/presets
    POST   /api/presets/{name}            stage a preset (no save)
    POST   /api/actions/fan-test          run the fan test now
    POST   /api/actions/{restart|update}  stage, returns a confirmation id
    POST   /api/actions/confirm/{id}      commit a staged action
    DELETE /api/actions/confirm/{id}      cancel it
    GET    /api/release                   latest published release

A script denied by policy comes back with outcome "blocked", never
"failed".
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, HTTPException

from fanpanel.api.config import cooling_down
from fanpanel.core.presets import PresetEngine, UnknownPresetError
from fanpanel.domain.enums import ScriptKind
from fanpanel.services.actions import (
    CONFIRMATION_PROMPTS,
    ActionCoolingDownError,
    ActionGuard,
    ConfirmationBook,
    ConfirmationNotFoundError,
    ScriptRunner,
)
from fanpanel.services.releases import ReleaseChecker, ReleaseCheckError
from fanpanel.store.staging import StagingArea

logger = logging.getLogger(__name__)


def create_actions_router(
    presets: PresetEngine,
    staging: StagingArea,
    runner: ScriptRunner,
    confirmations: ConfirmationBook,
    releases: ReleaseChecker,
    guard: ActionGuard,
) -> APIRouter:
    """Factory that wires preset and action endpoints to their services."""

    router = APIRouter(prefix="/api", tags=["actions"])

    # ── Presets ──────────────────────────────────────────────────────────

    @router.get("/presets")
    async def list_presets() -> dict[str, Any]:
        return {"presets": presets.describe()}

    @router.post("/presets/{name}")
    async def apply_preset(name: str) -> dict[str, Any]:
        try:
            guard.acquire("preset")
        except ActionCoolingDownError as exc:
            raise cooling_down(exc)

        try:
            values = presets.apply(name)
        except UnknownPresetError:
            raise HTTPException(status_code=404, detail=f"Unknown preset '{name}'")
        return {"preset": name, "applied": values, "staged": staging.staged}

    # ── Scripts ──────────────────────────────────────────────────────────

    @router.post("/actions/fan-test")
    async def fan_test() -> dict[str, Any]:
        try:
            guard.acquire(ScriptKind.FAN_TEST.value)
        except ActionCoolingDownError as exc:
            raise cooling_down(exc)

        result = await runner.run(ScriptKind.FAN_TEST)
        return result.model_dump(mode="json")

    @router.post("/actions/{kind}", status_code=202)
    async def stage_action(kind: ScriptKind) -> dict[str, Any]:
        if kind not in CONFIRMATION_PROMPTS:
            raise HTTPException(status_code=404, detail=f"'{kind.value}' needs no confirmation")
        try:
            guard.acquire(kind.value)
        except ActionCoolingDownError as exc:
            raise cooling_down(exc)

        return confirmations.stage(kind).model_dump(mode="json")

    @router.post("/actions/confirm/{confirmation_id}")
    async def confirm_action(confirmation_id: UUID) -> dict[str, Any]:
        try:
            kind = confirmations.confirm(confirmation_id)
        except ConfirmationNotFoundError:
            raise HTTPException(status_code=404, detail="Unknown or expired confirmation")

        result = await runner.run(kind)
        return result.model_dump(mode="json")

    @router.delete("/actions/confirm/{confirmation_id}")
    async def cancel_action(confirmation_id: UUID) -> dict[str, Any]:
        return {"cancelled": confirmations.cancel(confirmation_id)}

    # ── Release check ────────────────────────────────────────────────────

    @router.get("/release")
    async def latest_release() -> dict[str, Any]:
        try:
            info = await releases.latest()
        except ReleaseCheckError as exc:
            raise HTTPException(status_code=502, detail={"reason": exc.reason, "message": str(exc)})
        return info.model_dump()

    return router
