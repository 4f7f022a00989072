"""Declarative configuration schema for the fan daemon.

The schema is the single source of truth for which option names exist,
how a host form renders them, their ranges and defaults.  Its key set is
also the allow-list applied to imported documents.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from fanpanel.domain.enums import FieldKind

# A configuration document maps option name → string value.
ConfigDocument = dict[str, str]

_HOURS = tuple((f"{h:02d}", f"{h:02d}:00") for h in range(24))
_FLAG = (("0", "Disabled"), ("1", "Enabled"))


@dataclass(frozen=True)
class FieldSpec:
    """One configuration option as the host form sees it."""

    name: str
    label: str
    tab: str
    kind: FieldKind
    default: str
    description: str = ""
    minimum: int | None = None
    maximum: int | None = None
    choices: tuple[tuple[str, str], ...] = ()
    depends: tuple[str, str] | None = None

    def allowed_values(self) -> tuple[str, ...]:
        return tuple(value for value, _ in self.choices)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "label": self.label,
            "tab": self.tab,
            "kind": self.kind.value,
            "default": self.default,
            "description": self.description,
            "minimum": self.minimum,
            "maximum": self.maximum,
            "choices": [{"value": v, "label": lbl} for v, lbl in self.choices],
            "depends": (
                {"field": self.depends[0], "value": self.depends[1]}
                if self.depends else None
            ),
        }


def _threshold(name: str, label: str, default: str) -> FieldSpec:
    return FieldSpec(
        name=name,
        label=f"{label} Temp Threshold (°C)",
        tab="curve",
        kind=FieldKind.RANGE,
        default=default,
        description=f"Triggers the {label} Fan Speed profile.",
        minimum=30,
        maximum=90,
        depends=("mode", "auto"),
    )


def _speed(name: str, label: str, default: str) -> FieldSpec:
    return FieldSpec(
        name=name,
        label=f"{label} Fan Speed (%)",
        tab="curve",
        kind=FieldKind.RANGE,
        default=default,
        description=f"Speed percentage for the {label} Temp threshold.",
        minimum=0,
        maximum=100,
        depends=("mode", "auto"),
    )


_FIELDS: tuple[FieldSpec, ...] = (
    # ── General ──────────────────────────────────────────────────────────
    FieldSpec(
        name="enabled", label="Enable Service", tab="general",
        kind=FieldKind.FLAG, default="1", choices=_FLAG,
        description="Start or stop the background fan daemon on boot.",
    ),
    FieldSpec(
        name="mode", label="Operation Mode", tab="general",
        kind=FieldKind.CHOICE, default="auto",
        choices=(("auto", "Auto (Temperature Based)"), ("manual", "Manual (Fixed Speed)")),
        description="Run the fan from the temperature curve or at a fixed speed.",
    ),
    FieldSpec(
        name="manual_speed", label="Manual Fan Speed", tab="general",
        kind=FieldKind.RANGE, default="55", minimum=0, maximum=100,
        depends=("mode", "manual"),
        description="Fixed fan speed used while Manual mode is active.",
    ),
    FieldSpec(
        name="log_level", label="Logging Level", tab="general",
        kind=FieldKind.CHOICE, default="1",
        choices=(("1", "Verbose (Info & Errors)"), ("0", "Quiet (Errors Only)")),
        description="How much the daemon writes to the system log.",
    ),
    # ── Cooling curve ────────────────────────────────────────────────────
    _threshold("temp_high", "High", "60"),
    _speed("speed_high", "High", "100"),
    _threshold("temp_med", "Medium", "55"),
    _speed("speed_med", "Medium", "55"),
    _threshold("temp_low", "Low", "45"),
    _speed("speed_low", "Low", "25"),
    _threshold("temp_quiet", "Quiet", "40"),
    _speed("speed_quiet", "Quiet", "10"),
    FieldSpec(
        name="hysteresis", label="Hysteresis (°C)", tab="curve",
        kind=FieldKind.RANGE, default="4", minimum=1, maximum=10,
        depends=("mode", "auto"),
        description="Temperature drop required below a threshold before reducing fan speed.",
    ),
    # ── Night mode ───────────────────────────────────────────────────────
    FieldSpec(
        name="night_enabled", label="Enable Night Mode", tab="night",
        kind=FieldKind.FLAG, default="0", choices=_FLAG,
        description="Caps the maximum fan speed during night hours.",
    ),
    FieldSpec(
        name="night_start", label="Night Mode Start Hour", tab="night",
        kind=FieldKind.CHOICE, default="23", choices=_HOURS,
        depends=("night_enabled", "1"),
    ),
    FieldSpec(
        name="night_end", label="Night Mode End Hour", tab="night",
        kind=FieldKind.CHOICE, default="07", choices=_HOURS,
        depends=("night_enabled", "1"),
    ),
    FieldSpec(
        name="night_max", label="Maximum Night Speed (%)", tab="night",
        kind=FieldKind.RANGE, default="25", minimum=0, maximum=100,
        depends=("night_enabled", "1"),
    ),
    # ── Safety ───────────────────────────────────────────────────────────
    FieldSpec(
        name="shutdown_enabled", label="Critical Thermal Shutdown", tab="safety",
        kind=FieldKind.FLAG, default="1", choices=_FLAG,
        description="Power off the device if the temperature exceeds the critical limit.",
    ),
    FieldSpec(
        name="shutdown_temp", label="Shutdown Temperature (°C)", tab="safety",
        kind=FieldKind.RANGE, default="85", minimum=70, maximum=95,
        depends=("shutdown_enabled", "1"),
        description="Critical limit; reached 3 consecutive times, the system halts.",
    ),
)

SCHEMA: Mapping[str, FieldSpec] = MappingProxyType({f.name: f for f in _FIELDS})

# Import allow-list: exactly the live schema keys.
ALLOWED_KEYS: frozenset[str] = frozenset(SCHEMA)

# Cooling-curve thresholds, coolest first.  Each must be strictly greater
# than the one before it.
THRESHOLD_KEYS: tuple[str, ...] = ("temp_quiet", "temp_low", "temp_med", "temp_high")

# Short names used in validation messages.
THRESHOLD_NAMES: Mapping[str, str] = MappingProxyType({
    "temp_quiet": "Quiet",
    "temp_low": "Low",
    "temp_med": "Medium",
    "temp_high": "High",
    "shutdown_temp": "Shutdown",
})

CURVE_KEYS: tuple[str, ...] = (
    "temp_quiet", "speed_quiet",
    "temp_low", "speed_low",
    "temp_med", "speed_med",
    "temp_high", "speed_high",
    "hysteresis",
)

TABS: tuple[tuple[str, str], ...] = (
    ("general", "General"),
    ("curve", "Cooling Curve"),
    ("night", "Night Mode"),
    ("safety", "Safety"),
)


def default_document() -> ConfigDocument:
    """A fresh document holding every schema default."""
    return {name: spec.default for name, spec in SCHEMA.items()}
