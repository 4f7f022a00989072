"""StagingArea: proposed configuration values pending operator confirmation.

Edits, presets and imports land here first.  The persisted store is only
written by commit(), which validates the full staged-over-persisted view.
Saved values are dropped from staging on commit; cancellation drops all.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from fanpanel.core.validator import ConfigValidationError, ConfigValidator, ValidationIssue
from fanpanel.domain.schema import SCHEMA, ConfigDocument
from fanpanel.store.config_store import ConfigStore

logger = logging.getLogger(__name__)


class StagingArea:
    """Transient overlay of staged values over a ConfigStore."""

    def __init__(self, store: ConfigStore, validator: ConfigValidator | None = None) -> None:
        self._store = store
        self._validator = validator or ConfigValidator()
        self._staged: ConfigDocument = {}

    @property
    def staged(self) -> ConfigDocument:
        """Staged values only (returns a copy)."""
        return dict(self._staged)

    @property
    def has_changes(self) -> bool:
        return bool(self._staged)

    def effective(self) -> ConfigDocument:
        """The document as it would be persisted: staged over persisted."""
        document = self._store.snapshot()
        document.update(self._staged)
        return document

    def stage(self, values: Mapping[str, Any]) -> None:
        """Stage *values* in one step; nothing is staged if a key is unknown."""
        unknown = sorted(k for k in values if k not in SCHEMA)
        if unknown:
            raise KeyError(f"Unknown option(s): {', '.join(unknown)}")
        self._staged.update({k: str(v) for k, v in values.items()})
        logger.debug("Staged %d value(s)", len(values))

    def stage_field(self, name: str, value: Any) -> None:
        """Stage a single form edit after checking it against the staged view."""
        self.stage_fields({name: value})

    def stage_fields(self, values: Mapping[str, Any]) -> None:
        """Stage form edits together, checked against the view that already
        includes all of them.  Any violation stages nothing.
        """
        working = self.effective()
        working.update({k: str(v) for k, v in values.items()})
        issues: list[ValidationIssue] = []
        for name, value in values.items():
            for issue in self._validator.check_field(name, value, working):
                if issue not in issues:
                    issues.append(issue)
        if issues:
            raise ConfigValidationError(issues)
        self._staged.update({k: str(v) for k, v in values.items()})

    def discard(self) -> int:
        """Drop all staged values; returns how many were dropped."""
        count = len(self._staged)
        self._staged.clear()
        if count:
            logger.info("Discarded %d staged value(s)", count)
        return count

    def commit(self) -> ConfigDocument:
        """Validate the effective document, persist it, clear what was saved.

        Raises:
            ConfigValidationError: If the effective document is invalid.
                Nothing is written and the staged values are kept.
        """
        pending, document = self._apply()
        try:
            self._store.save()
        except OSError:
            self._store.reload()
            raise
        self._settle(pending)
        return document

    async def commit_async(self) -> ConfigDocument:
        """commit() with the file write moved off the event loop.

        Edits staged while the write is in flight stay staged; only values
        that were part of this save and are unchanged since are cleared.
        """
        pending, document = self._apply()
        try:
            await asyncio.to_thread(self._store.save)
        except OSError:
            self._store.reload()
            raise
        self._settle(pending)
        return document

    # ── Internals ────────────────────────────────────────────────────────

    def _apply(self) -> tuple[ConfigDocument, ConfigDocument]:
        pending = dict(self._staged)
        document = self._store.snapshot()
        document.update(pending)
        self._validator.check(document)
        for name, value in pending.items():
            self._store.set(name, value)
        return pending, document

    def _settle(self, pending: ConfigDocument) -> None:
        for name, value in pending.items():
            if self._staged.get(name) == value:
                del self._staged[name]
        logger.info("Committed %d staged value(s)", len(pending))
