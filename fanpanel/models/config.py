"""Pydantic request bodies for the configuration endpoints."""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, Field

ConfigValue = Union[str, int]


class StageRequest(BaseModel):
    """Form edits to stage, option name → value."""

    values: dict[str, ConfigValue] = Field(..., min_length=1)


class ValidateRequest(BaseModel):
    """Document to check; defaults to the current staged view when empty."""

    values: dict[str, ConfigValue] = Field(default_factory=dict)
