"""ImportExportCodec: portable JSON config documents.

Export stamps the persisted document with ``_exported`` and ``_version``
metadata keys that do not exist in the live schema.

Import is a trust boundary:
    1. Only allow-listed schema keys survive; anything else is dropped
       without comment.
    2. Values are scalars reduced to ``[A-Za-z0-9._-]`` before they get
       anywhere near the config store.
    3. Curve thresholds must stay strictly ordered once merged over the
       current staged view, or the whole import is rejected.
    4. Success stages every retained value in one step.  Persisting is the
       caller's separate save.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, Field

from fanpanel.core.validator import ConfigValidator, ValidationIssue
from fanpanel.domain.schema import ALLOWED_KEYS, THRESHOLD_KEYS, ConfigDocument
from fanpanel.foundation.clock import utc_now
from fanpanel.store.config_store import ConfigStore
from fanpanel.store.staging import StagingArea

logger = logging.getLogger(__name__)

EXPORTED_KEY = "_exported"
VERSION_KEY = "_version"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class ImportRejectedError(ValueError):
    """Raised when an imported document is refused as a whole."""

    def __init__(self, reason: str, issues: list[ValidationIssue] | None = None) -> None:
        self.reason = reason
        self.issues = list(issues or [])
        detail = "; ".join(i.message for i in self.issues)
        super().__init__(f"{reason}: {detail}" if detail else reason)


class ImportResult(BaseModel):
    """Outcome of a successful import."""

    applied: int = Field(..., ge=0, description="Number of values staged")
    keys: list[str] = Field(default_factory=list, description="Staged option names, sorted")

    model_config = {"frozen": True}


def sanitize_value(value: Any) -> str | None:
    """Reduce an untrusted scalar to safe characters; None if nothing usable."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if not isinstance(value, (str, int, float)):
        return None
    cleaned = _UNSAFE_CHARS.sub("", str(value))
    return cleaned or None


class ImportExportCodec:
    """Serializes the persisted config and stages imported documents.

    Args:
        store: Persisted configuration (read for export).
        staging: Where accepted imports are staged.
        validator: Supplies the threshold ordering rule.
        version: Installed build identifier stamped into exports.
    """

    def __init__(
        self,
        store: ConfigStore,
        staging: StagingArea,
        validator: ConfigValidator | None = None,
        version: str = "unknown",
    ) -> None:
        self._store = store
        self._staging = staging
        self._validator = validator or ConfigValidator()
        self._version = version

    # ── Export ───────────────────────────────────────────────────────────

    def export_document(self) -> dict[str, str]:
        document = self._store.snapshot()
        document[EXPORTED_KEY] = utc_now().isoformat()
        document[VERSION_KEY] = self._version
        return document

    def export_json(self) -> str:
        return json.dumps(self.export_document(), indent=2, sort_keys=True)

    # ── Import ───────────────────────────────────────────────────────────

    def import_document(self, text: str | bytes) -> ImportResult:
        """Parse, filter, sanitize, check and stage an imported document.

        Raises:
            ImportRejectedError: Malformed JSON, a non-object document, or
                out-of-order thresholds.  Nothing is staged and values
                staged earlier are left as they were.
        """
        try:
            data = json.loads(text)
        except ValueError as exc:
            logger.warning("Import rejected: invalid JSON (%s)", exc)
            raise ImportRejectedError("Invalid JSON document") from exc

        if not isinstance(data, dict):
            logger.warning("Import rejected: top level is %s", type(data).__name__)
            raise ImportRejectedError("Configuration document must be a JSON object")

        retained: ConfigDocument = {}
        for key in ALLOWED_KEYS.intersection(data):
            value = sanitize_value(data[key])
            if value is not None:
                retained[key] = value

        dropped = len(data) - len(retained)
        if dropped:
            logger.info("Import ignored %d key(s) outside the schema or without a usable value", dropped)

        self._check_thresholds(retained)

        self._staging.stage(retained)
        logger.info("Imported %d value(s) into staging", len(retained))
        return ImportResult(applied=len(retained), keys=sorted(retained))

    def _check_thresholds(self, retained: ConfigDocument) -> None:
        imported = {k: retained[k] for k in THRESHOLD_KEYS if k in retained}
        if not imported:
            return

        # Thresholds the document leaves out keep their staged/persisted value
        effective = self._staging.effective()
        merged = {k: effective[k] for k in THRESHOLD_KEYS if k in effective}
        merged.update(imported)

        issues = self._validator.check_thresholds(merged)
        if issues:
            logger.warning("Import rejected: %s", "; ".join(i.message for i in issues))
            raise ImportRejectedError("Temperature thresholds are out of order", issues)
