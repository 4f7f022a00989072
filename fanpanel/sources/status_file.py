"""StatusFileSource: reads the JSON status file the daemon rewrites each cycle."""

from __future__ import annotations

import asyncio
from pathlib import Path

from fanpanel.sources.base import StatusSource


class StatusFileSource(StatusSource):
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    async def read(self) -> str | None:
        try:
            return await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
