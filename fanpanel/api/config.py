"""REST endpoints for the configuration form, import and export.

Paths under /api/config:
    GET    /schema     field table for the host form
    GET    ""          persisted, staged and effective documents
    PUT    /staged     stage form edits (validated, all-or-nothing)
    DELETE /staged     cancel: discard staged edits
    POST   /validate   dry-run validation
    POST   /save       commit staged edits to the store
    GET    /export     download the persisted document
    POST   /import     stage an uploaded document

Nothing reaches the store except through /save.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request, Response

from fanpanel.core.codec import ImportExportCodec, ImportRejectedError
from fanpanel.core.validator import ConfigValidationError, ConfigValidator, ValidationIssue
from fanpanel.domain.schema import SCHEMA, TABS
from fanpanel.models.config import StageRequest, ValidateRequest
from fanpanel.services.actions import ActionCoolingDownError, ActionGuard
from fanpanel.store.config_store import ConfigStore
from fanpanel.store.staging import StagingArea

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "argononev3-config.json"


def issues_detail(message: str, issues: list[ValidationIssue]) -> dict[str, Any]:
    return {"message": message, "issues": [i.to_dict() for i in issues]}


def cooling_down(exc: ActionCoolingDownError) -> HTTPException:
    return HTTPException(
        status_code=429,
        detail=str(exc),
        headers={"Retry-After": str(max(1, round(exc.retry_after)))},
    )


def create_config_router(
    store: ConfigStore,
    staging: StagingArea,
    validator: ConfigValidator,
    codec: ImportExportCodec,
    guard: ActionGuard,
) -> APIRouter:
    """Factory that wires the config endpoints to store, staging and codec."""

    router = APIRouter(prefix="/api/config", tags=["config"])

    @router.get("/schema")
    async def get_schema() -> dict[str, Any]:
        return {
            "tabs": [{"name": name, "title": title} for name, title in TABS],
            "fields": [spec.to_dict() for spec in SCHEMA.values()],
        }

    @router.get("")
    async def get_config() -> dict[str, Any]:
        return {
            "persisted": store.snapshot(),
            "staged": staging.staged,
            "effective": staging.effective(),
        }

    @router.put("/staged")
    async def stage_values(body: StageRequest) -> dict[str, Any]:
        try:
            staging.stage_fields(body.values)
        except ConfigValidationError as exc:
            raise HTTPException(status_code=422, detail=issues_detail("Invalid values", exc.issues))
        return {"staged": staging.staged}

    @router.delete("/staged")
    async def discard_staged() -> dict[str, Any]:
        return {"discarded": staging.discard()}

    @router.post("/validate")
    async def validate(body: ValidateRequest) -> dict[str, Any]:
        document: dict[str, Any] = dict(staging.effective())
        document.update(body.values)
        issues = validator.validate(document)
        return {"valid": not issues, "issues": [i.to_dict() for i in issues]}

    @router.post("/save")
    async def save() -> dict[str, Any]:
        try:
            guard.acquire("save")
        except ActionCoolingDownError as exc:
            raise cooling_down(exc)

        try:
            document = await staging.commit_async()
        except ConfigValidationError as exc:
            # Rejected before anything was written; let the corrected form retry
            guard.release("save")
            raise HTTPException(
                status_code=422, detail=issues_detail("Configuration not saved", exc.issues),
            )
        except OSError as exc:
            logger.error("Saving configuration failed: %s", exc)
            raise HTTPException(status_code=500, detail="Could not write configuration")
        return {"saved": True, "config": document}

    @router.get("/export")
    async def export_config() -> Response:
        return Response(
            content=codec.export_json(),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
        )

    @router.post("/import")
    async def import_config(request: Request) -> dict[str, Any]:
        try:
            guard.acquire("import")
        except ActionCoolingDownError as exc:
            raise cooling_down(exc)

        try:
            result = codec.import_document(await request.body())
        except ImportRejectedError as exc:
            raise HTTPException(status_code=422, detail=issues_detail(exc.reason, exc.issues))
        return {**result.model_dump(), "staged": staging.staged}

    return router
