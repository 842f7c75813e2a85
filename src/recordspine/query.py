"""Query state for single-table statements.

Fluent calls accumulate filter, order and limit state which compiles into
parameterized SQL fragments. Two layers:

* :class:`QuerySpec` is an immutable value object. Every builder method
  returns a new spec, so a spec can be built once and passed explicitly to
  any terminal operation (``users.find_all(query=spec)``).
* :class:`QueryState` is the per-model mutable holder behind the model's own
  fluent API (``users.where(...).order_by(...).find_all()``). Terminal
  operations take a snapshot and reset it, success or failure.

Compilation is deterministic: filters are emitted in ascending key order,
never registration order, so equal filter sets always produce identical SQL
text and bindings::

    >>> spec = QuerySpec().where("status", 2).where("age >", 18)
    >>> spec.compile_filters().clause
    'age > :age AND status = :status'
    >>> spec.compile_filters().bindings
    {'age': 18, 'status': 2}

Binding names derive from the column name. When two filters target the same
column (``"age >"`` and ``"age <"``) later ones get a numeric suffix
(``:age``, ``:age_2``); the sorted order makes the suffixes stable.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, NamedTuple

from recordspine.errors import InvalidArgumentError

_WHITESPACE = re.compile(r"\s+")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

OPERATORS = frozenset(
    {
        "=", "!=", "<>", "<", ">", "<=", ">=",
        "LIKE", "NOT LIKE", "IN", "NOT IN", "IS", "IS NOT",
    }
)
SET_OPERATORS = frozenset({"IN", "NOT IN"})
DIRECTIONS = ("ASC", "DESC")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace and trim."""
    return _WHITESPACE.sub(" ", text.strip())


def is_empty_value(value: Any) -> bool:
    """A filter value that turns its key into a raw condition fragment.

    Only ``None`` and ``""`` count as empty; ``0`` and ``False`` are real
    values and are bound like any other.
    """
    return value is None or (isinstance(value, str) and value == "")


class ReturnShape(str, Enum):
    """Shape of the rows a read operation yields."""

    MAPPING = "array"
    RECORD = "object"
    CLASS = "class"


@dataclass(frozen=True)
class Filter:
    """One filter entry: ``"<column> [operator]"`` → value, or a raw fragment."""

    key: str
    value: Any = ""

    @property
    def is_raw(self) -> bool:
        return is_empty_value(self.value)

    def parse(self) -> tuple[str, str]:
        """Split the key into ``(column, operator)``; operator defaults to ``=``."""
        key = normalize_whitespace(self.key)
        column, _, operator = key.partition(" ")
        operator = operator.upper() or "="
        if not _IDENTIFIER.match(column):
            raise InvalidArgumentError(f"Invalid filter column: {column!r}")
        if operator not in OPERATORS:
            raise InvalidArgumentError(f"Invalid filter operator: {operator!r}")
        if operator in SET_OPERATORS and not isinstance(self.value, (list, tuple)):
            raise InvalidArgumentError(f"{operator} filter on {column!r} needs a list value")
        return column, operator


class BindNames:
    """Allocates unique binding names within one statement."""

    def __init__(self, taken: Iterable[str] = ()) -> None:
        self._taken = set(taken)

    def allocate(self, base: str) -> str:
        base = re.sub(r"\W", "_", base)
        name = base
        n = 1
        while name in self._taken:
            n += 1
            name = f"{base}_{n}"
        self._taken.add(name)
        return name


class CompiledFilters(NamedTuple):
    clause: str
    bindings: dict[str, Any]

    @property
    def sql(self) -> str:
        """The clause with its ``WHERE`` keyword, or empty text."""
        return f"WHERE {self.clause}" if self.clause else ""


def compile_filters(
    filters: Mapping[str, Any],
    names: BindNames | None = None,
) -> CompiledFilters:
    """Compile a filter mapping into ``(clause, bindings)``.

    Parameterized conditions and raw fragments are joined with ``AND`` in
    ascending key order. An empty mapping compiles to an empty clause.
    """
    names = names or BindNames()
    conditions: list[str] = []
    bindings: dict[str, Any] = {}

    for key in sorted(filters):
        entry = Filter(key, filters[key])
        if entry.is_raw:
            fragment = normalize_whitespace(key)
            if fragment:
                conditions.append(fragment)
            continue

        column, operator = entry.parse()
        name = names.allocate(column)
        if operator in SET_OPERATORS:
            conditions.append(f"{column} {operator} (:{name})")
            bindings[name] = list(entry.value)
        else:
            conditions.append(f"{column} {operator} :{name}")
            bindings[name] = entry.value

    return CompiledFilters(" AND ".join(conditions), bindings)


def compile_order(order: tuple[str, str] | None) -> str:
    if not order:
        return ""
    column, direction = order
    return f"ORDER BY {column} {direction}"


def compile_limit(limit: tuple[int, int] | None) -> str:
    if limit is None:
        return ""
    count, offset = limit
    return f"LIMIT {offset}, {count}"


def _check_non_negative_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"{name} must be a non-negative integer, got {value!r}")
    return value


@dataclass(frozen=True)
class QuerySpec:
    """Immutable filter/order/limit/return-shape specification.

    ``order`` is ``(column, direction)``; ``limit`` is ``(count, offset)``.
    ``shape`` of ``None`` means "the model's default return shape".
    """

    filters: Mapping[str, Any] = field(default_factory=dict)
    order: tuple[str, str] | None = None
    limit: tuple[int, int] | None = None
    shape: ReturnShape | None = None
    record_class: type | None = None

    # -- builders ------------------------------------------------------------

    def where(self, key: str | Mapping[str, Any], value: Any = "") -> QuerySpec:
        """Merge one filter (``key``, ``value``) or a mapping of filters."""
        if isinstance(key, Mapping):
            additions = dict(key)
        else:
            additions = {key: value}
        if not additions:
            raise InvalidArgumentError("where() needs at least one filter")
        for name in additions:
            if not isinstance(name, str) or not name.strip():
                raise InvalidArgumentError("Filter keys must be non-empty strings")
        merged = dict(self.filters)
        merged.update(additions)
        return replace(self, filters=merged)

    def where_args(self, *args: Any) -> QuerySpec:
        """Variadic form used by ``find_by``/``count_by``/...

        ``(mapping,)`` merges the mapping; ``(key,)`` adds a raw fragment;
        ``(key, value)`` adds one filter.
        """
        if not args:
            raise InvalidArgumentError("At least one filter argument is required")
        if isinstance(args[0], Mapping):
            return self.where(args[0])
        value = args[1] if len(args) > 1 else ""
        return self.where(args[0], value)

    def order_by(self, column: str, direction: str = "ASC") -> QuerySpec:
        if not column or not isinstance(column, str):
            raise InvalidArgumentError("order_by() needs a column name")
        direction = str(direction).upper()
        if direction not in DIRECTIONS:
            raise InvalidArgumentError(f"Order direction must be ASC or DESC, got {direction!r}")
        if not _IDENTIFIER.match(column.strip()):
            raise InvalidArgumentError(f"Invalid order column: {column!r}")
        return replace(self, order=(column.strip(), direction))

    def limit_to(self, count: int, offset: int = 0) -> QuerySpec:
        count = _check_non_negative_int("limit", count)
        offset = _check_non_negative_int("offset", offset)
        return replace(self, limit=(count, offset))

    def as_array(self) -> QuerySpec:
        return replace(self, shape=ReturnShape.MAPPING, record_class=None)

    def as_object(self, record_class: type | None = None) -> QuerySpec:
        if record_class is None:
            return replace(self, shape=ReturnShape.RECORD, record_class=None)
        return replace(self, shape=ReturnShape.CLASS, record_class=record_class)

    # -- compilation ---------------------------------------------------------

    def compile_filters(self, names: BindNames | None = None) -> CompiledFilters:
        return compile_filters(self.filters, names)

    def compile_order(self) -> str:
        return compile_order(self.order)

    def compile_limit(self) -> str:
        return compile_limit(self.limit)

    @property
    def is_empty(self) -> bool:
        return not self.filters and self.order is None and self.limit is None


class QueryState:
    """Per-model mutable query state.

    Not safe for concurrent use: one model instance serves one in-flight
    operation at a time.
    """

    def __init__(
        self,
        default_shape: ReturnShape = ReturnShape.RECORD,
        default_class: type | None = None,
    ) -> None:
        self.default_shape = default_shape
        self.default_class = default_class
        self._spec = QuerySpec()

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    def set_filter(self, key: str | Mapping[str, Any], value: Any = "") -> None:
        self._spec = self._spec.where(key, value)

    def set_order(self, column: str, direction: str = "ASC") -> None:
        self._spec = self._spec.order_by(column, direction)

    def set_limit(self, count: int, offset: int = 0) -> None:
        self._spec = self._spec.limit_to(count, offset)

    def set_shape(self, shape: ReturnShape, record_class: type | None = None) -> None:
        if shape is ReturnShape.MAPPING:
            self._spec = self._spec.as_array()
        elif shape is ReturnShape.CLASS:
            self._spec = self._spec.as_object(record_class)
        else:
            self._spec = self._spec.as_object()

    def snapshot(self) -> QuerySpec:
        """The current spec with the return shape resolved against the default."""
        spec = self._spec
        if spec.shape is None:
            spec = replace(spec, shape=self.default_shape, record_class=self.default_class)
        return spec

    def reset(self) -> None:
        """Back to empty filters, order and limit, and the default shape."""
        self._spec = QuerySpec()


__all__ = [
    "OPERATORS",
    "ReturnShape",
    "Filter",
    "BindNames",
    "CompiledFilters",
    "compile_filters",
    "compile_order",
    "compile_limit",
    "normalize_whitespace",
    "is_empty_value",
    "QuerySpec",
    "QueryState",
]
