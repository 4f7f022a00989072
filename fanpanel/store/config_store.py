"""File-backed configuration store.

The daemon reads the same document, so the store only ever holds the
schema's keys with string values.  Writes go through a temporary file and
an atomic replace so the daemon never sees a half-written document.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from fanpanel.domain.schema import SCHEMA, ConfigDocument, default_document

logger = logging.getLogger(__name__)


class ConfigStore(Protocol):
    """get/set/save/reload primitives over the persisted document."""

    def get(self, name: str) -> str | None:
        ...

    def set(self, name: str, value: str) -> None:
        ...

    def snapshot(self) -> ConfigDocument:
        ...

    def save(self) -> None:
        ...

    def reload(self) -> None:
        ...


class JsonConfigStore:
    """ConfigStore persisted as a flat JSON object.

    Args:
        path: Location of the JSON document.  A missing file reads as the
              schema defaults and is created on the first save.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._values: ConfigDocument = default_document()
        self.reload()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, name: str) -> str | None:
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        if name not in SCHEMA:
            raise KeyError(f"Unknown option '{name}'")
        self._values[name] = str(value)

    def snapshot(self) -> ConfigDocument:
        return dict(self._values)

    def save(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self._path)
        logger.info("Saved configuration to %s", self._path)

    def reload(self) -> None:
        values = default_document()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info("No configuration at %s, using defaults", self._path)
            data = {}
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable configuration at %s (%s), using defaults", self._path, exc)
            data = {}

        if not isinstance(data, dict):
            logger.warning("Configuration at %s is not an object, using defaults", self._path)
            data = {}

        for name, value in data.items():
            if name in SCHEMA and value is not None:
                values[name] = str(value)
        self._values = values
