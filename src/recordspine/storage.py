"""SQLAlchemy implementation of the :class:`~recordspine.protocols.Storage` contract.

Raw statements compiled by a model (``SELECT ... WHERE age > :age``) run
through :func:`sqlalchemy.text` with named bindings. Array bindings
(``id IN (:values)``) become expanding parameters. Single-row writes use
SQLAlchemy Core against a reflected :class:`~sqlalchemy.Table`, so
generated identifiers come back the same way on every backend.

Each call runs in its own ``engine.begin()`` block and commits on success.
Driver errors surface as :class:`~recordspine.errors.StorageError` with the
original exception chained.

Usage::

    storage = create_storage("sqlite:///app.db")
    storage.list_columns("users")
    # ('id', 'name', 'email', 'created_on', 'modified_on')
"""

from __future__ import annotations

import re
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from sqlalchemy import MetaData, Table, and_, bindparam, create_engine, inspect, text, true
from sqlalchemy import delete as sa_delete
from sqlalchemy import insert as sa_insert
from sqlalchemy import update as sa_update
from sqlalchemy.engine import CursorResult, Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from recordspine.errors import StorageError
from recordspine.logging import get_logger
from recordspine.protocols import ParamType, ParamTypes
from recordspine.settings import get_settings

logger = get_logger(__name__)

_ARRAY_TYPES = (ParamType.INT_ARRAY, ParamType.STR_ARRAY)
_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def create_storage(url: str | None = None, *, echo: bool = False, **kwargs: Any) -> SQLAlchemyStorage:
    """Create a storage collaborator from a database URL (default: settings)."""
    url = url or get_settings().database_url
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        if url in _MEMORY_URLS:
            kwargs.setdefault("poolclass", StaticPool)
    return SQLAlchemyStorage(create_engine(url, echo=echo, **kwargs))


def _text(query: str, bindings: Mapping[str, Any], param_types: ParamTypes):
    expanding = [name for name, hint in param_types.items() if hint in _ARRAY_TYPES]
    for name in expanding:
        # "IN (:values)" → "IN :values"; the expanding parameter renders its own parens
        query = re.sub(rf"\(\s*:{re.escape(name)}\s*\)", f":{name}", query)
    statement = text(query)
    if expanding:
        statement = statement.bindparams(
            *(bindparam(name, expanding=True) for name in expanding if name in bindings)
        )
    return statement


class SQLAlchemyStorage:
    """Storage collaborator over a SQLAlchemy :class:`~sqlalchemy.engine.Engine`."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._metadata = MetaData()
        self._tables: dict[str, Table] = {}
        self._lock = threading.Lock()

    # -- reads -------------------------------------------------------------

    def select(
        self,
        query: str,
        bindings: Mapping[str, Any],
        param_types: ParamTypes,
        fetch_all: bool = False,
    ) -> dict[str, Any] | list[dict[str, Any]] | None:
        statement = _text(query, bindings, param_types)
        logger.debug("select", sql=query, bindings=dict(bindings))
        try:
            with self.engine.connect() as conn:
                result = conn.execute(statement, dict(bindings)).mappings()
                if fetch_all:
                    return [dict(row) for row in result.all()]
                row = result.first()
        except SQLAlchemyError as exc:
            raise StorageError("SELECT failed", sql=query, cause=exc) from exc
        return dict(row) if row else None

    def list_columns(self, table: str) -> Sequence[str]:
        try:
            return [column["name"] for column in inspect(self.engine).get_columns(table)]
        except NoSuchTableError:
            return []
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot introspect table {table!r}", cause=exc) from exc

    # -- writes ------------------------------------------------------------

    def insert(self, table: str, record: Mapping[str, Any], param_types: ParamTypes) -> Any:
        statement = sa_insert(self._table(table)).values(**record)
        return self._write(statement, f"INSERT INTO {table}", _inserted_key)

    def replace(self, table: str, record: Mapping[str, Any], param_types: ParamTypes) -> Any:
        target = self._table(table)
        keys = [column.name for column in target.primary_key.columns]
        dialect = self.engine.dialect.name
        if dialect == "sqlite":
            statement = sa_insert(target).values(**record).prefix_with("OR REPLACE")
        elif dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as pg_insert

            statement = pg_insert(target).values(**record)
            statement = statement.on_conflict_do_update(
                index_elements=keys,
                set_={k: statement.excluded[k] for k in record if k not in keys},
            )
        elif dialect in ("mysql", "mariadb"):
            from sqlalchemy.dialects.mysql import insert as mysql_insert

            statement = mysql_insert(target).values(**record)
            statement = statement.on_duplicate_key_update(
                {k: v for k, v in record.items() if k not in keys}
            )
        else:
            raise StorageError(f"replace() is not supported on {dialect!r}")

        inserted = self._write(statement, f"REPLACE INTO {table}", _inserted_key)
        if inserted is None and len(keys) == 1:
            return record.get(keys[0])
        return inserted

    def update(
        self,
        table: str,
        record: Mapping[str, Any],
        where: Mapping[str, Any],
        param_types: ParamTypes,
    ) -> int:
        target = self._table(table)
        statement = sa_update(target).where(self._where(target, where)).values(**record)
        return self._write(statement, f"UPDATE {table}", _rowcount)

    def delete(self, table: str, where: Mapping[str, Any], param_types: ParamTypes) -> int:
        target = self._table(table)
        statement = sa_delete(target).where(self._where(target, where))
        return self._write(statement, f"DELETE FROM {table}", _rowcount)

    def execute_update(
        self,
        query: str,
        bindings: Mapping[str, Any],
        param_types: ParamTypes,
    ) -> int:
        statement = _text(query, bindings, param_types)
        return self._write(statement, query, _rowcount, dict(bindings))

    # -- internals -----------------------------------------------------------

    def _table(self, name: str) -> Table:
        with self._lock:
            if name not in self._tables:
                try:
                    self._tables[name] = Table(name, self._metadata, autoload_with=self.engine)
                except SQLAlchemyError as exc:
                    raise StorageError(f"Cannot reflect table {name!r}", cause=exc) from exc
            return self._tables[name]

    @staticmethod
    def _where(target: Table, where: Mapping[str, Any]):
        if not where:
            return true()
        return and_(*(target.c[column] == value for column, value in where.items()))

    def _write(
        self,
        statement: Any,
        label: str,
        extract: Callable[[CursorResult], Any],
        bindings: dict[str, Any] | None = None,
    ) -> Any:
        logger.debug("write", sql=label, bindings=bindings)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement, bindings) if bindings else conn.execute(statement)
                return extract(result)
        except SQLAlchemyError as exc:
            raise StorageError("Write failed", sql=label, cause=exc) from exc


def _rowcount(result: CursorResult) -> int:
    return result.rowcount


def _inserted_key(result: CursorResult) -> Any:
    key = result.inserted_primary_key
    if key and key[0] is not None:
        return key[0]
    return result.lastrowid or None


__all__ = [
    "SQLAlchemyStorage",
    "create_storage",
]
