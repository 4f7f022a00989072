"""Pydantic models for operator actions and their outcomes."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from fanpanel.domain.enums import ScriptKind, ScriptOutcome


class ScriptResult(BaseModel):
    """Outcome of one allow-listed script run."""

    kind: ScriptKind
    outcome: ScriptOutcome
    exit_code: Optional[int] = Field(None, description="Process exit code, None if it never ran")
    detail: str = Field(default="", description="Short diagnostic for the operator")

    model_config = {"frozen": True}


class PendingAction(BaseModel):
    """A destructive action staged until the operator confirms it."""

    confirmation_id: UUID
    kind: ScriptKind
    prompt: str = Field(..., description="Question to put to the operator")
    expires_in_seconds: float = Field(..., ge=0.0)

    model_config = {"frozen": True}


class ReleaseInfo(BaseModel):
    """Latest published release compared with the installed build."""

    tag: str
    installed: str
    update_available: bool

    model_config = {"frozen": True}
