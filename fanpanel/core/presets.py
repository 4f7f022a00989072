"""PresetEngine: named cooling curves staged into the active form.

Presets are complete, pre-vetted curve field sets.  They already satisfy
the threshold ordering rule, so apply() stages them without re-validation.  The
persisted store is never touched; saving is a separate operator action.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping

from fanpanel.domain.enums import PresetName
from fanpanel.domain.schema import CURVE_KEYS, SCHEMA, ConfigDocument, FieldSpec
from fanpanel.store.staging import StagingArea

logger = logging.getLogger(__name__)


def _preset(
    quiet: tuple[int, int],
    low: tuple[int, int],
    med: tuple[int, int],
    high: tuple[int, int],
    hysteresis: int,
) -> Mapping[str, str]:
    return MappingProxyType({
        "temp_quiet": str(quiet[0]), "speed_quiet": str(quiet[1]),
        "temp_low": str(low[0]), "speed_low": str(low[1]),
        "temp_med": str(med[0]), "speed_med": str(med[1]),
        "temp_high": str(high[0]), "speed_high": str(high[1]),
        "hysteresis": str(hysteresis),
    })


# (temperature °C, speed %) per level
PRESETS: Mapping[PresetName, Mapping[str, str]] = MappingProxyType({
    PresetName.SILENT: _preset((45, 10), (55, 20), (65, 40), (75, 80), hysteresis=5),
    PresetName.BALANCED: _preset((40, 10), (45, 25), (55, 55), (60, 100), hysteresis=4),
    PresetName.PERFORMANCE: _preset((35, 25), (42, 50), (50, 75), (58, 100), hysteresis=3),
})

PRESET_DESCRIPTIONS: Mapping[PresetName, str] = MappingProxyType({
    PresetName.SILENT: "Lets the board run warmer to keep the fan quiet.",
    PresetName.BALANCED: "The stock curve.",
    PresetName.PERFORMANCE: "Spins up early and hard to keep temperatures low.",
})


class UnknownPresetError(KeyError):
    """Raised when apply() is given a name outside the preset table."""


class PresetEngine:
    """Stages preset curves through a fixed binding table.

    The binding table (option name → schema field) is resolved once here,
    so every preset key is known to be a real curve field before any
    preset is applied.
    """

    def __init__(self, staging: StagingArea) -> None:
        self._staging = staging
        self._bindings: Mapping[str, FieldSpec] = MappingProxyType(
            {name: SCHEMA[name] for name in CURVE_KEYS}
        )
        for preset, values in PRESETS.items():
            missing = set(self._bindings) - set(values)
            if missing:
                raise ValueError(f"Preset '{preset.value}' is incomplete: {sorted(missing)}")

    def describe(self) -> list[dict]:
        return [
            {
                "name": preset.value,
                "description": PRESET_DESCRIPTIONS[preset],
                "values": dict(values),
            }
            for preset, values in PRESETS.items()
        ]

    def apply(self, name: str) -> ConfigDocument:
        """Stage preset *name*; returns the staged field values.

        Raises:
            UnknownPresetError: If *name* is not a known preset.
        """
        try:
            preset = PresetName(name)
        except ValueError:
            raise UnknownPresetError(name) from None

        values = {key: PRESETS[preset][key] for key in self._bindings}
        self._staging.stage(values)
        logger.info("Staged preset '%s'", preset.value)
        return values
