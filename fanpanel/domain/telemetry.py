"""Telemetry models: the typed records on both sides of the reducer.

RawStatus is the daemon's status document parsed at the trust boundary.
No field is guaranteed present; absence means "unknown", never zero.
ViewModel is the fully-resolved, render-ready result of one poll tick.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from fanpanel.domain.enums import Severity

logger = logging.getLogger(__name__)


# ── Sample ───────────────────────────────────────────────────────────────────

class Sample(BaseModel):
    """One temperature reading in the rolling history."""

    temperature_c: int
    ordinal: int = Field(..., ge=0, description="Monotonic arrival sequence number")

    model_config = {"frozen": True}


# ── Raw daemon status ────────────────────────────────────────────────────────

class RawStatus(BaseModel):
    """Status document published by the fan daemon.

    Unknown keys are ignored.  Values are kept raw (level is not range
    checked here) so the reducer can decide what an odd value means.
    """

    mode: Optional[str] = None
    level: Optional[int] = None
    active_speed: Optional[int] = None
    temp: Optional[int] = None
    night: Optional[int] = None
    night_end: Optional[str] = None
    uptime: Optional[int] = None
    peak: Optional[int] = None
    i2c_bus: Optional[str] = None

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("mode", mode="before")
    @classmethod
    def mode_is_lowercase(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @field_validator("night_end", "i2c_bus", mode="before")
    @classmethod
    def numbers_become_text(cls, v: Any) -> Any:
        # The daemon writes night_end as 7 or "07" depending on version
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


def parse_status(text: str | bytes | None) -> RawStatus:
    """Parse the daemon status file contents into a RawStatus.

    Never raises: missing content, malformed JSON or a non-object document
    yield an empty RawStatus, and individually mistyped fields are dropped.
    """
    if not text:
        return RawStatus()

    try:
        data = json.loads(text)
    except ValueError as exc:
        logger.debug("Status document is not valid JSON: %s", exc)
        return RawStatus()

    if not isinstance(data, dict):
        logger.debug("Status document is not an object: %r", type(data).__name__)
        return RawStatus()

    try:
        return RawStatus.model_validate(data)
    except ValidationError as exc:
        bad = {err["loc"][0] for err in exc.errors() if err.get("loc")}
        logger.debug("Dropping mistyped status fields: %s", sorted(map(str, bad)))

    cleaned = {k: v for k, v in data.items() if k not in bad}
    try:
        return RawStatus.model_validate(cleaned)
    except ValidationError:
        return RawStatus()


# ── View model ───────────────────────────────────────────────────────────────

class ViewModel(BaseModel):
    """Render-ready snapshot of daemon state for one poll tick.

    Replaced wholesale every tick; never persisted.
    """

    running: bool
    status_label: str
    temperature_c: Optional[int] = None
    temperature_label: str
    temperature_severity: Severity
    peak_c: Optional[int] = None
    mode_label: str
    speed_label: str
    speed_color: Optional[str] = None
    night_active: bool = False
    night_end_label: str
    uptime_label: str
    bus_label: str
    sparkline: str = Field("", description="SVG markup of recent temperatures, empty if < 2 samples")

    model_config = {"frozen": True}
