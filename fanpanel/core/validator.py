"""ConfigValidator: structural and cross-field checks on config documents.

The validator is stateless.  Callers pass the document the check should
see; for form edits and imports that is the staged-over-persisted view,
so a dependent field is always compared with its current staged value.

Violations are reported, never clamped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from fanpanel.domain.enums import FieldKind
from fanpanel.domain.schema import SCHEMA, THRESHOLD_NAMES, FieldSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationIssue:
    """A single violated rule."""

    field: str
    message: str
    related: str | None = None

    def to_dict(self) -> dict:
        return {"field": self.field, "related": self.related, "message": self.message}


class ConfigValidationError(ValueError):
    """Raised when a document violates one or more rules."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = list(issues)
        super().__init__("; ".join(issue.message for issue in self.issues))


@dataclass(frozen=True)
class OrderingRule:
    """``upper`` must be strictly greater than ``lower``."""

    upper: str
    lower: str

    def holds(self, upper_value: int, lower_value: int) -> bool:
        return upper_value > lower_value

    def message(self, upper_value: int, lower_value: int) -> str:
        return (
            f"{_display(self.upper)} ({upper_value}) must be greater than "
            f"{_display(self.lower)} ({lower_value})"
        )


THRESHOLD_RULES: tuple[OrderingRule, ...] = (
    OrderingRule("temp_high", "temp_med"),
    OrderingRule("temp_med", "temp_low"),
    OrderingRule("temp_low", "temp_quiet"),
)
SHUTDOWN_RULE = OrderingRule("shutdown_temp", "temp_high")
ORDERING_RULES: tuple[OrderingRule, ...] = THRESHOLD_RULES + (SHUTDOWN_RULE,)


class ConfigValidator:
    """Range, choice and ordering checks over a configuration document.

    Only fields present in the document are checked; a rule spanning two
    fields is skipped unless both are present and numeric.
    """

    def __init__(self, schema: Mapping[str, FieldSpec] = SCHEMA) -> None:
        self._schema = schema

    # ── Public API ───────────────────────────────────────────────────────

    def validate(self, document: Mapping[str, Any]) -> list[ValidationIssue]:
        """Return every violation in *document* (empty list when valid)."""
        issues: list[ValidationIssue] = []
        for name, value in document.items():
            spec = self._schema.get(name)
            if spec is not None:
                issues.extend(self._check_value(spec, value))
        issues.extend(self._check_ordering(document, ORDERING_RULES))
        return issues

    def check(self, document: Mapping[str, Any]) -> None:
        """Raise ConfigValidationError if *document* has any violation."""
        issues = self.validate(document)
        if issues:
            logger.info("Config rejected: %s", "; ".join(i.message for i in issues))
            raise ConfigValidationError(issues)

    def check_thresholds(self, document: Mapping[str, Any]) -> list[ValidationIssue]:
        """Strict ordering of the four curve thresholds only.

        A threshold that is present but not an integer is itself a violation.
        """
        issues: list[ValidationIssue] = []
        for rule in THRESHOLD_RULES:
            for key in (rule.upper, rule.lower):
                if key in document and _as_int(document[key]) is None:
                    issue = ValidationIssue(
                        field=key,
                        message=f"{_display(key)} must be an integer (got {document[key]!r})",
                    )
                    if issue not in issues:
                        issues.append(issue)
        issues.extend(self._check_ordering(document, THRESHOLD_RULES))
        return issues

    def check_field(
        self,
        name: str,
        value: Any,
        context: Mapping[str, Any],
    ) -> list[ValidationIssue]:
        """Validate a single edit of *name* against the staged *context*."""
        spec = self._schema.get(name)
        if spec is None:
            return [ValidationIssue(field=name, message=f"Unknown option '{name}'")]

        issues = list(self._check_value(spec, value))
        if issues:
            return issues

        merged = dict(context)
        merged[name] = value
        rules = tuple(r for r in ORDERING_RULES if name in (r.upper, r.lower))
        return self._check_ordering(merged, rules)

    # ── Checks ───────────────────────────────────────────────────────────

    @staticmethod
    def _check_value(spec: FieldSpec, value: Any) -> list[ValidationIssue]:
        if spec.kind == FieldKind.RANGE:
            number = _as_int(value)
            if number is None:
                return [ValidationIssue(
                    field=spec.name,
                    message=f"{spec.label} must be an integer (got {value!r})",
                )]
            if spec.minimum is not None and number < spec.minimum:
                return [ValidationIssue(
                    field=spec.name,
                    message=(
                        f"{spec.label} must be at least {spec.minimum} "
                        f"(allowed {spec.minimum}-{spec.maximum}, got {number})"
                    ),
                )]
            if spec.maximum is not None and number > spec.maximum:
                return [ValidationIssue(
                    field=spec.name,
                    message=(
                        f"{spec.label} must be at most {spec.maximum} "
                        f"(allowed {spec.minimum}-{spec.maximum}, got {number})"
                    ),
                )]
            return []

        allowed = spec.allowed_values()
        if str(value) not in allowed:
            return [ValidationIssue(
                field=spec.name,
                message=f"{spec.label} must be one of {', '.join(allowed)} (got {value!r})",
            )]
        return []

    @staticmethod
    def _check_ordering(
        document: Mapping[str, Any],
        rules: tuple[OrderingRule, ...],
    ) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for rule in rules:
            if rule.upper not in document or rule.lower not in document:
                continue
            upper = _as_int(document[rule.upper])
            lower = _as_int(document[rule.lower])
            if upper is None or lower is None:
                continue
            if not rule.holds(upper, lower):
                issues.append(ValidationIssue(
                    field=rule.upper,
                    related=rule.lower,
                    message=rule.message(upper, lower),
                ))
        return issues


# ── Helpers ──────────────────────────────────────────────────────────────────

def _display(key: str) -> str:
    name = THRESHOLD_NAMES.get(key, key)
    if key == "shutdown_temp":
        return f"{name} temperature"
    return f"{name} threshold"


def _as_int(value: Any) -> int | None:
    """Parse a config value as an integer; None if it is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            return None
    return None
