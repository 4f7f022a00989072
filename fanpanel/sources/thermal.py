"""ThermalZoneSensor: kernel thermal-zone reading used when the daemon is silent.

Tries each configured zone in order; the final fallback is the literal "0".
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Sequence

from fanpanel.sources.base import TemperatureSensor

logger = logging.getLogger(__name__)

FALLBACK_READING = "0"


class ThermalZoneSensor(TemperatureSensor):
    def __init__(self, paths: Sequence[str | Path]) -> None:
        self._paths = [Path(p) for p in paths]

    async def read(self) -> str:
        for path in self._paths:
            try:
                text = await asyncio.to_thread(path.read_text, encoding="utf-8")
            except OSError as exc:
                logger.debug("Thermal zone %s unreadable: %s", path, exc)
                continue
            text = text.strip()
            if not text:
                logger.debug("Thermal zone %s is empty", path)
                continue
            return text
        return FALLBACK_READING
