"""Controlled enumerations for the fanpanel domain.

Every categorical field crossing a module boundary references an enum
defined here.
"""

from __future__ import annotations

from enum import Enum


class FanMode(str, Enum):
    """Operating mode published by the daemon."""

    AUTO = "auto"
    MANUAL = "manual"


class Severity(str, Enum):
    """Temperature severity band used for coloring."""

    NORMAL = "normal"
    WARN = "warn"
    CRITICAL = "critical"


class FieldKind(str, Enum):
    """How a configuration field is rendered and validated."""

    FLAG = "flag"
    CHOICE = "choice"
    RANGE = "range"


class PresetName(str, Enum):
    """Built-in cooling-curve presets."""

    SILENT = "silent"
    BALANCED = "balanced"
    PERFORMANCE = "performance"


class ScriptKind(str, Enum):
    """The allow-listed scripts an operator may trigger."""

    FAN_TEST = "fan-test"
    RESTART = "restart"
    UPDATE = "update"


class ScriptOutcome(str, Enum):
    """Result of an allow-listed script invocation."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    BLOCKED = "blocked"


# Warn and critical band floors (°C), shared by the reducer and sparkline.
WARN_TEMP_C = 60
CRITICAL_TEMP_C = 80


def classify_temperature(temperature_c: int | None) -> Severity:
    """Map a temperature to its severity band; unknown reads as normal."""
    if temperature_c is None:
        return Severity.NORMAL
    if temperature_c >= CRITICAL_TEMP_C:
        return Severity.CRITICAL
    if temperature_c >= WARN_TEMP_C:
        return Severity.WARN
    return Severity.NORMAL
