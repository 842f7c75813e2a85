"""Schema-aware field protection.

Before a write reaches storage, :class:`FieldAuthorizer` strips every field
the caller may not set:

* the primary key,
* every field registered as protected (``model.protect("password_hash")``),
* every field that is not a column of the bound table.

The column list comes from the storage collaborator's introspection, once
per model instance, through :class:`SchemaFieldList`. An empty column list
means the table name or connection is wrong; it raises
:class:`~recordspine.errors.ConfigurationError` rather than silently
discarding every field.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from recordspine.errors import ConfigurationError, InvalidArgumentError
from recordspine.hooks import HookContext
from recordspine.logging import get_logger

logger = get_logger(__name__)


class SchemaFieldList:
    """Lazily loaded, single-assignment list of a table's columns.

    The loader runs at most once, even with concurrent first access.
    """

    def __init__(self, table: str, loader: Callable[[str], Sequence[str]]) -> None:
        self.table = table
        self._loader = loader
        self._fields: tuple[str, ...] | None = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._fields is not None

    def get(self) -> tuple[str, ...]:
        if self._fields is None:
            with self._lock:
                if self._fields is None:
                    fields = tuple(self._loader(self.table))
                    if not fields:
                        logger.error("schema_introspection_empty", table=self.table)
                        raise ConfigurationError(
                            f"Cannot initialize the fields of table {self.table!r}"
                        ).with_context(table=self.table)
                    logger.debug("schema_loaded", table=self.table, fields=fields)
                    self._fields = fields
        return self._fields

    def __contains__(self, name: object) -> bool:
        return name in self.get()

    def __iter__(self):
        return iter(self.get())


class FieldAuthorizer:
    """Strips primary-key, protected and unknown fields from write payloads."""

    def __init__(
        self,
        schema: SchemaFieldList,
        primary_key: str,
        protected: Iterable[str] = (),
    ) -> None:
        self.schema = schema
        self.primary_key = primary_key
        self.protected: list[str] = []
        for name in protected:
            self.protect(name)

    def protect(self, field_name: str) -> None:
        if not field_name or not isinstance(field_name, str):
            raise InvalidArgumentError("protect() needs a field name")
        if field_name not in self.protected:
            self.protected.append(field_name)

    def protect_fields(self, row: Any) -> Any:
        """Remove protected fields from a mapping or an attributed record."""
        if not row:
            return row
        if isinstance(row, Mapping):
            return {k: v for k, v in row.items() if k not in self.protected}
        stripped = copy.copy(row)
        for name in self.protected:
            if hasattr(stripped, name):
                delattr(stripped, name)
        return stripped

    def authorize_fields(self, context: HookContext) -> Any:
        """Hook form of :meth:`protect_fields`; no change for empty payloads."""
        if not context.fields:
            return None
        return self.protect_fields(context.fields)

    def prepare_data(self, record: Mapping[str, Any] | None) -> dict[str, Any]:
        """Keep only writable columns of the bound table."""
        if not record:
            return {}
        if not isinstance(record, Mapping):
            record = vars(record)
        columns = self.schema.get()
        skipped = {self.primary_key, *self.protected}
        return {
            name: value
            for name, value in record.items()
            if name not in skipped and name in columns
        }


__all__ = [
    "SchemaFieldList",
    "FieldAuthorizer",
]
