"""
Collaborator contracts consumed by record models.

A :class:`~recordspine.model.RecordModel` never talks to a driver or a
rule engine directly. It depends on two shapes:

Architecture:
    ::

        protocols.py
        ├── Storage        : statement execution + schema introspection
        └── RuleValidator  : rule-based field validation and filtering

    Implementations:
        storage.SQLAlchemyStorage   → Storage
        rules.PipeRuleValidator     → RuleValidator

Guardrails:
    ❌ DON'T: Import a driver in model code
    ✅ DO: Accept any object matching Storage (tests use a recording fake)

    ❌ DON'T: Raise from Storage for "no row affected"
    ✅ DO: Return a falsy value; raise StorageError only for driver failures

Tags:
    protocol, storage, validator, contracts
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class ParamType(str, Enum):
    """Binding type hints passed alongside parameter maps."""

    INT = "int"
    STR = "str"
    INT_ARRAY = "int_array"
    STR_ARRAY = "str_array"


ParamTypes = dict[str, ParamType]


def param_types(bindings: Mapping[str, Any]) -> ParamTypes:
    """Derive type hints from bound values.

    Lists and tuples become array hints (expanded into ``IN (...)`` lists by
    the storage collaborator); ``int`` values are INT; everything else is STR.
    """
    hints: ParamTypes = {}
    for key, value in bindings.items():
        if isinstance(value, (list, tuple)):
            all_int = all(isinstance(v, int) and not isinstance(v, bool) for v in value)
            hints[key] = ParamType.INT_ARRAY if all_int else ParamType.STR_ARRAY
        elif isinstance(value, int) and not isinstance(value, bool):
            hints[key] = ParamType.INT
        else:
            hints[key] = ParamType.STR
    return hints


@runtime_checkable
class Storage(Protocol):
    """
    Minimal synchronous storage interface for record models.

    Parameter maps use named bindings (``:name`` in query text). Write
    methods return a falsy value when nothing was written.
    """

    def select(
        self,
        query: str,
        bindings: Mapping[str, Any],
        param_types: ParamTypes,
        fetch_all: bool = False,
    ) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Run a SELECT; one mapping (or None) unless ``fetch_all``."""
        ...

    def insert(self, table: str, record: Mapping[str, Any], param_types: ParamTypes) -> Any:
        """Insert one row; return the generated identifier or None."""
        ...

    def replace(self, table: str, record: Mapping[str, Any], param_types: ParamTypes) -> Any:
        """Insert-or-replace one row; return the identifier or None."""
        ...

    def update(
        self,
        table: str,
        record: Mapping[str, Any],
        where: Mapping[str, Any],
        param_types: ParamTypes,
    ) -> int:
        """Update rows matching ``where`` equality; return affected count."""
        ...

    def delete(self, table: str, where: Mapping[str, Any], param_types: ParamTypes) -> int:
        """Delete rows matching ``where`` equality; return affected count."""
        ...

    def execute_update(
        self,
        query: str,
        bindings: Mapping[str, Any],
        param_types: ParamTypes,
    ) -> int:
        """Run a raw write statement; return affected count."""
        ...

    def list_columns(self, table: str) -> Sequence[str]:
        """Return the table's column names in declaration order."""
        ...


@runtime_checkable
class RuleValidator(Protocol):
    """Rule-based validator used by the ValidationGate."""

    def set_rules(self, rules: Mapping[str, str]) -> None:
        """Replace the active rule set (field → rule expression)."""
        ...

    def populate(self, record: Mapping[str, Any]) -> None:
        """Load the candidate record."""
        ...

    def is_valid(self) -> bool:
        """Evaluate the rules against the populated record."""
        ...

    def get_errors(self) -> dict[str, list[str]]:
        """Field-keyed error messages from the last ``is_valid`` call."""
        ...

    def get_values(self) -> dict[str, Any]:
        """Filtered values from the last successful ``is_valid`` call."""
        ...


__all__ = [
    "ParamType",
    "ParamTypes",
    "param_types",
    "Storage",
    "RuleValidator",
]
