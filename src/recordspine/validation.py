"""Validation gate in front of every write.

The gate owns a model's declared rule sets and the last failure. It
delegates rule evaluation to a :class:`~recordspine.protocols.RuleValidator`,
whose filtered output is authoritative for the values that reach storage
(trimmed strings, coerced integers...).

Examples:
    >>> gate = ValidationGate(PipeRuleValidator(), {"name": "required|trim"})
    >>> gate.validate({"name": "  Ada "}, "insert")
    Ok({'name': 'Ada'})
    >>> gate.validate({}, "insert").is_err()
    True
    >>> gate.errors
    {'name': ['name: Field required']}
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from recordspine.errors import RecordValidationError
from recordspine.logging import get_logger
from recordspine.protocols import RuleValidator
from recordspine.result import Err, Ok, Result

logger = get_logger(__name__)


def merge_rules(
    rules: Mapping[str, str],
    insert_rules: Mapping[str, str] | None,
) -> dict[str, str]:
    """Append insert-only rules to the base rules (``"a"`` + ``"b"`` → ``"a|b"``)."""
    merged = dict(rules)
    for field_name, expression in (insert_rules or {}).items():
        current = merged.get(field_name)
        merged[field_name] = f"{current}|{expression}" if current else expression
    return merged


class ValidationGate:
    """Applies declared rules (plus insert-only additions) to candidate records."""

    def __init__(
        self,
        validator: RuleValidator,
        rules: Mapping[str, str] | None = None,
        insert_rules: Mapping[str, str] | None = None,
        *,
        skip_validation: bool = False,
    ) -> None:
        self.validator = validator
        self.rules: dict[str, str] = dict(rules or {})
        self.insert_rules: dict[str, str] = dict(insert_rules or {})
        self.skip_validation = skip_validation
        self._errors: dict[str, list[str]] = {}

    @property
    def errors(self) -> dict[str, list[str]]:
        """Field-keyed messages from the last failed validation."""
        return {k: list(v) for k, v in self._errors.items()}

    def rules_for(self, operation: str) -> dict[str, str]:
        if operation == "insert":
            return merge_rules(self.rules, self.insert_rules)
        return dict(self.rules)

    def validate(
        self,
        record: Mapping[str, Any],
        operation: str = "update",
        skip_validation: bool | None = None,
    ) -> Result[dict[str, Any]]:
        """Return ``Ok(sanitized)`` or ``Err(RecordValidationError)``.

        ``skip_validation=None`` falls back to the instance-wide default.
        Skipping, or having no rules, returns the record unchanged.
        """
        skip = self.skip_validation if skip_validation is None else skip_validation
        if skip or not self.rules:
            return Ok(dict(record))

        self.validator.set_rules(self.rules_for(operation))
        self.validator.populate(record)

        if not self.validator.is_valid():
            self._errors = self.validator.get_errors()
            logger.info("validation_failed", operation=operation, fields=sorted(self._errors))
            return Err(RecordValidationError(self.errors))

        self._errors = {}
        return Ok(self.validator.get_values())


__all__ = [
    "merge_rules",
    "ValidationGate",
]
