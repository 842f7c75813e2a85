"""
Record model: CRUD over one table through hooks, validation and field protection.

Subclass :class:`RecordModel` once per table and declare its configuration
as class attributes::

    class Users(RecordModel):
        table_name = "users"
        validate_rules = {"email": "required|trim|valid_email"}
        validate_insert_rules = {"password": "required|min_length[8]"}
        protected_fields = ("password_hash",)
        after_find = ("hide_secrets",)

        def hide_secrets(self, context):
            ...

    users = Users(create_storage("sqlite:///app.db"))
    users.where("status", 1).where("age >", 18).order_by("name").limit(10).find_all()
    users.insert({"email": "ada@example.com", "name": "Ada"})

Architecture:
    ::

        read:   query state ─► beforeFind ─► compile ─► storage.select
                            ─► afterFind (per row) ─► reset query state

        write:  record ─► ValidationGate ─► before{Insert,Update} (stamp,
                authorize, user hooks) ─► FieldAuthorizer.prepare_data
                ─► storage ─► after{Insert,Update} ─► reset query state

    Every terminal call consumes the pending query state first, so nothing
    leaks into the next call whether this one succeeds, fails or raises.
    Terminal calls also accept an explicit ``query=QuerySpec(...)`` which
    replaces the pending state for that call.

Failure contract:
    - InvalidArgumentError: raised before any storage interaction
    - validation failure: write returns False, messages in ``model.errors``
    - hook rejection (falsy payload): write returns False, no storage call
    - ConfigurationError / StorageError: raised

Concurrency:
    A model instance holds mutable query and error state. Do not share one
    instance across concurrent operations; create one per worker.

Tags:
    model, crud, repository, hooks, validation
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from types import SimpleNamespace
from typing import Any, ClassVar, get_args

from recordspine.errors import ConfigurationError, InvalidArgumentError
from recordspine.hooks import HookContext, HookStage, ObserverPipeline, PipelineState, stamp_record
from recordspine.logging import get_logger
from recordspine.protocols import ParamType, RuleValidator, Storage, param_types
from recordspine.query import (
    BindNames,
    Filter,
    QuerySpec,
    QueryState,
    ReturnShape,
    is_empty_value,
    normalize_whitespace,
)
from recordspine.result import Result
from recordspine.rules import PipeRuleValidator
from recordspine.schema import FieldAuthorizer, SchemaFieldList
from recordspine.settings import DateFormat, RecordSettings, get_settings
from recordspine.validation import ValidationGate

logger = get_logger(__name__)

HookSpec = str | Callable[[HookContext], Any]

_CHAIN_ATTRIBUTES: dict[HookStage, str] = {
    HookStage.BEFORE_FIND: "before_find",
    HookStage.AFTER_FIND: "after_find",
    HookStage.BEFORE_INSERT: "before_insert",
    HookStage.AFTER_INSERT: "after_insert",
    HookStage.BEFORE_UPDATE: "before_update",
    HookStage.AFTER_UPDATE: "after_update",
    HookStage.BEFORE_DELETE: "before_delete",
    HookStage.AFTER_DELETE: "after_delete",
}


def _shape_of(return_type: str | type) -> tuple[ReturnShape, type | None]:
    if isinstance(return_type, type):
        return ReturnShape.CLASS, return_type
    if return_type == "array":
        return ReturnShape.MAPPING, None
    if return_type == "object":
        return ReturnShape.RECORD, None
    raise ConfigurationError(f"Unknown return type: {return_type!r}")


def _as_mapping(record: Any) -> dict[str, Any]:
    if isinstance(record, Mapping):
        return dict(record)
    if hasattr(record, "__dict__"):
        return dict(vars(record))
    raise InvalidArgumentError(f"Expected a mapping or attributed record, got {type(record).__name__}")


def _check_id(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"Parameter should be an integer, got {value!r}")
    return value


def _check_ids(values: Any) -> list[Any]:
    if not isinstance(values, (list, tuple)):
        raise InvalidArgumentError(f"Parameter should be a list, got {type(values).__name__}")
    return list(values)


class RecordModel:
    """Base class for table-bound record models.

    Class attributes configure the subclass; ``None`` means "use the
    process settings" (:class:`~recordspine.settings.RecordSettings`).
    """

    table_name: ClassVar[str | None] = None
    primary_key: str | None = None

    return_type: ClassVar[str | type] = "object"

    date_format: str | None = None
    auto_created: ClassVar[bool] = True
    created_field: str | None = None
    auto_modified: ClassVar[bool] = True
    modified_field: str | None = None

    skip_validation: bool | None = None
    validate_rules: ClassVar[Mapping[str, str]] = {}
    validate_insert_rules: ClassVar[Mapping[str, str]] = {}
    protected_fields: ClassVar[Sequence[str]] = ()

    before_find: ClassVar[Sequence[HookSpec]] = ()
    after_find: ClassVar[Sequence[HookSpec]] = ()
    before_insert: ClassVar[Sequence[HookSpec]] = ()
    after_insert: ClassVar[Sequence[HookSpec]] = ()
    before_update: ClassVar[Sequence[HookSpec]] = ()
    after_update: ClassVar[Sequence[HookSpec]] = ()
    before_delete: ClassVar[Sequence[HookSpec]] = ()
    after_delete: ClassVar[Sequence[HookSpec]] = ()

    def __init__(
        self,
        storage: Storage,
        validator: RuleValidator | None = None,
        *,
        settings: RecordSettings | None = None,
    ) -> None:
        if not self.table_name:
            raise ConfigurationError(f"{type(self).__name__} does not declare a table_name")

        self.settings = settings or get_settings()
        self.storage = storage
        self.primary_key = self.primary_key or self.settings.primary_key
        self.date_format = self.date_format or self.settings.date_format
        if self.date_format not in get_args(DateFormat):
            raise ConfigurationError(f"Unknown date format: {self.date_format!r}")
        self.created_field = self.created_field or self.settings.created_field
        self.modified_field = self.modified_field or self.settings.modified_field
        if self.skip_validation is None:
            self.skip_validation = self.settings.skip_validation

        shape, record_class = _shape_of(self.return_type)
        self._state = QueryState(shape, record_class)

        self._gate = ValidationGate(
            validator or PipeRuleValidator(),
            self.validate_rules,
            self.validate_insert_rules,
            skip_validation=self.skip_validation,
        )
        self._schema = SchemaFieldList(self.table(), storage.list_columns)
        self._authorizer = FieldAuthorizer(self._schema, self.primary_key, self.protected_fields)

        self.hooks = ObserverPipeline(owner=self)
        for stage, attribute in _CHAIN_ATTRIBUTES.items():
            self.hooks.extend(stage, getattr(self, attribute))

        # Built-ins always lead their chains: stamping first, then field protection.
        self.hooks.register(HookStage.BEFORE_INSERT, self.authorize_fields, front=True)
        self.hooks.register(HookStage.BEFORE_UPDATE, self.authorize_fields, front=True)
        if self.auto_created:
            self.hooks.register(HookStage.BEFORE_INSERT, self.stamp_created, front=True)
        if self.auto_modified:
            self.hooks.register(HookStage.BEFORE_UPDATE, self.stamp_modified, front=True)

        self._log = logger.bind(model=type(self).__name__, table=self.table())

    # ------------------------------------------------------------------
    # Query building (fluent, pending until the next terminal call)
    # ------------------------------------------------------------------

    def where(self, key: str | Mapping[str, Any], value: Any = "") -> RecordModel:
        """Add a filter. A key may carry an operator (``"age >"``); an empty
        value makes the key a raw condition (``where("deleted_on IS NULL")``)."""
        self._state.set_filter(key, value)
        return self

    def order_by(self, column: str, direction: str = "ASC") -> RecordModel:
        self._state.set_order(column, direction)
        return self

    def order(self, direction: str = "ASC") -> RecordModel:
        """Order by the primary key."""
        return self.order_by(self.primary_key, direction)

    def limit(self, count: int, offset: int = 0) -> RecordModel:
        self._state.set_limit(count, offset)
        return self

    def as_array(self) -> RecordModel:
        """Return plain dicts from the next read."""
        self._state.set_shape(ReturnShape.MAPPING)
        return self

    def as_object(self, record_class: type | None = None) -> RecordModel:
        """Return attributed records (or ``record_class(**row)``) from the next read."""
        self._state.set_shape(ReturnShape.CLASS if record_class else ReturnShape.RECORD, record_class)
        return self

    @property
    def pending(self) -> QuerySpec:
        """The query state the next terminal call will consume."""
        return self._state.spec

    def _consume(self, query: QuerySpec | None = None) -> QuerySpec:
        spec = self._state.snapshot()
        self._state.reset()
        if query is None:
            return spec
        if query.shape is None:
            return QuerySpec(
                query.filters, query.order, query.limit,
                self._state.default_shape, self._state.default_class,
            )
        return query

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(self, id: int, *, query: QuerySpec | None = None) -> Any:
        """Single row by primary key, or None."""
        spec = self._consume(query)
        _check_id(id)

        if not self._before(HookStage.BEFORE_FIND, HookContext("find", id=id)):
            return None

        sql = f"SELECT * FROM {self.table()} WHERE {self.primary_key} = :value"
        row = self._select(sql, {"value": id}, spec)
        if not row:
            return None
        return self.hooks.trigger(HookStage.AFTER_FIND, HookContext("find", id=id, fields=row))

    def find_by(self, *args: Any, query: QuerySpec | None = None) -> Any:
        """Single row matching the given filters, or None."""
        spec = self._consume(query).where_args(*args)
        return self._find_rows("find_by", spec.limit_to(1), single=True)

    def find_many(self, ids: Sequence[Any], *, query: QuerySpec | None = None) -> list[Any]:
        """Rows whose primary key is in ``ids``, honouring the pending order."""
        spec = self._consume(query)
        ids = _check_ids(ids)
        if not ids:
            return []

        run = self.hooks.run(HookStage.BEFORE_FIND, HookContext("find_many", ids=ids))
        if run.state is PipelineState.ABORTED:
            return []
        if isinstance(run.value, (list, tuple)):
            ids = list(run.value)
        if not ids:
            return []

        sql = f"SELECT * FROM {self.table()} WHERE {self.primary_key} IN (:values) {spec.compile_order()}"
        rows = self._select(sql, {"values": ids}, spec, fetch_all=True) or []
        return [self._after_find("find_many", row) for row in rows]

    def find_many_by(self, *args: Any, query: QuerySpec | None = None) -> list[Any]:
        spec = self._consume(query).where_args(*args)
        return self.find_all(query=spec)

    def find_all(self, *, query: QuerySpec | None = None) -> list[Any]:
        """Every row matching the filter/order/limit state."""
        return self._find_rows("find_all", self._consume(query), single=False)

    def first(self, *, query: QuerySpec | None = None) -> Any:
        """First row of ``find_all`` limited to one, or None."""
        spec = self._consume(query).limit_to(1, 0)
        rows = self.find_all(query=spec)
        return rows[0] if rows else None

    def _find_rows(self, method: str, spec: QuerySpec, *, single: bool) -> Any:
        context = HookContext(method, fields=dict(spec.filters))
        run = self.hooks.run(HookStage.BEFORE_FIND, context)
        if run.state is PipelineState.ABORTED:
            return None if single else []
        if isinstance(context.fields, Mapping) and dict(context.fields) != dict(spec.filters):
            spec = QuerySpec(dict(context.fields), spec.order, spec.limit, spec.shape, spec.record_class)

        compiled = spec.compile_filters()
        sql = " ".join(
            part
            for part in (
                f"SELECT * FROM {self.table()}",
                compiled.sql,
                spec.compile_order(),
                spec.compile_limit(),
            )
            if part
        )
        if single:
            row = self._select(sql, compiled.bindings, spec)
            return self._after_find(method, row) if row else None
        rows = self._select(sql, compiled.bindings, spec, fetch_all=True) or []
        return [self._after_find(method, row) for row in rows]

    def _after_find(self, method: str, row: Any) -> Any:
        return self.hooks.trigger(HookStage.AFTER_FIND, HookContext(method, fields=row))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, record: Any, skip_validation: bool | None = None) -> Any:
        """Insert one row; return the generated identifier or False."""
        self._consume()
        data = self._validated(record, "insert", skip_validation)
        if data is None:
            return False

        data = self._before(HookStage.BEFORE_INSERT, HookContext("insert", fields=data))
        if not data:
            return False
        data = self.prepare_data(data)

        result = self.storage.insert(self.table(), data, param_types(data))
        if not result:
            self._log.info("insert_failed")
            return False
        self.hooks.trigger(HookStage.AFTER_INSERT, HookContext("insert", id=result, fields=data))
        return result

    def replace(self, record: Any, skip_validation: bool | None = None) -> Any:
        """Insert or replace one row keyed by its primary key; return its identifier or False."""
        self._consume()
        data = self._validated(record, "insert", skip_validation)
        if data is None:
            return False

        prepared = self.prepare_data(data)
        if self.primary_key in data and not is_empty_value(data[self.primary_key]):
            prepared[self.primary_key] = data[self.primary_key]

        result = self.storage.replace(self.table(), prepared, param_types(prepared))
        if not result:
            return False
        self.hooks.trigger(HookStage.AFTER_INSERT, HookContext("replace", id=result, fields=prepared))
        return result

    def update(self, id: Any, record: Any, skip_validation: bool | None = None) -> Any:
        """Update one row by primary key; return the affected count or False."""
        self._consume()
        if id is None or isinstance(id, bool):
            raise InvalidArgumentError(f"Invalid primary key value: {id!r}")
        data = self._validated(record, "update", skip_validation)
        if data is None:
            return False

        data = self._before(HookStage.BEFORE_UPDATE, HookContext("update", id=id, fields=data))
        if not data:
            return False
        data = self.prepare_data(data)

        result: Any = False
        if data:
            types = param_types(data)
            types[self.primary_key] = ParamType.INT if isinstance(id, int) else ParamType.STR
            result = self.storage.update(self.table(), data, {self.primary_key: id}, types)

        self.hooks.trigger(
            HookStage.AFTER_UPDATE,
            HookContext("update", id=id, fields=data, result=result),
        )
        return result

    def update_many(self, ids: Sequence[Any], record: Any, skip_validation: bool | None = None) -> Any:
        """Apply the same values to every row in ``ids``; None for an empty list."""
        self._consume()
        ids = _check_ids(ids)
        if not ids:
            return None
        data = self._validated(record, "update", skip_validation)
        if data is None:
            return False

        data = self._before(HookStage.BEFORE_UPDATE, HookContext("update_many", ids=ids, fields=data))
        if not data:
            return False
        data = self.prepare_data(data)
        if not data:
            return False

        names = BindNames({"values"})
        bindings: dict[str, Any] = {"values": ids}
        assignments = []
        for column, value in data.items():
            name = names.allocate(column)
            assignments.append(f"{column} = :{name}")
            bindings[name] = value

        sql = (
            f"UPDATE {self.table()} SET {', '.join(assignments)} "
            f"WHERE {self.primary_key} IN (:values)"
        )
        result = self.storage.execute_update(sql, bindings, param_types(bindings))
        self.hooks.trigger(
            HookStage.AFTER_UPDATE,
            HookContext("update_many", ids=ids, fields=data, result=result),
        )
        return result

    def update_by(self, *args: Any, skip_validation: bool | None = None) -> Any:
        """``update_by(<filters...>, record)``: the last argument is the record."""
        self._consume()
        filters, record = args[:-1], args[-1] if args else None
        if not filters or not record:
            raise InvalidArgumentError("update_by() needs filter arguments and a record")
        spec = QuerySpec().where_args(*filters)

        data = self._validated(record, "update", skip_validation)
        if data is None:
            return False
        data = self._before(HookStage.BEFORE_UPDATE, HookContext("update_by", fields=data))
        if not data:
            return False
        data = self.prepare_data(data)
        if not data:
            return False

        names = BindNames()
        compiled = spec.compile_filters(names)
        bindings = dict(compiled.bindings)
        assignments = []
        for column, value in data.items():
            name = names.allocate(column)
            assignments.append(f"{column} = :{name}")
            bindings[name] = value

        sql = f"UPDATE {self.table()} SET {', '.join(assignments)} {compiled.sql}"
        result = self.storage.execute_update(sql, bindings, param_types(bindings))
        self.hooks.trigger(
            HookStage.AFTER_UPDATE,
            HookContext("update_by", fields=data, result=result),
        )
        return result

    def update_all(self, record: Any, skip_validation: bool | None = None) -> Any:
        """Apply ``record`` to every row of the table, ignoring any filter state."""
        self._consume()
        data = self._validated(record, "update", skip_validation)
        if data is None:
            return False
        data = self._before(HookStage.BEFORE_UPDATE, HookContext("update_all", fields=data))
        if not data:
            return False
        data = self.prepare_data(data)
        if not data:
            return False

        self._log.warning("update_all", fields=sorted(data))
        result = self.storage.update(self.table(), data, {}, param_types(data))
        self.hooks.trigger(
            HookStage.AFTER_UPDATE,
            HookContext("update_all", fields=data, result=result),
        )
        return result

    def increment(self, id: Any, column: str, amount: int = 1) -> int:
        """Atomically add ``abs(amount)`` to a numeric column."""
        return self._step(id, column, amount, "+")

    def decrement(self, id: Any, column: str, amount: int = 1) -> int:
        """Atomically subtract ``abs(amount)`` from a numeric column."""
        return self._step(id, column, amount, "-")

    def _step(self, id: Any, column: str, amount: int, sign: str) -> int:
        self._consume()
        if id is None:
            raise InvalidArgumentError("Invalid primary key value: None")
        if column not in self.table_fields():
            raise InvalidArgumentError(f"Unknown column {column!r} for table {self.table()!r}")
        try:
            step = abs(int(amount))
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"Step amount must be an integer, got {amount!r}") from exc

        sql = (
            f"UPDATE {self.table()} SET {column} = {column} {sign} :amount "
            f"WHERE {self.primary_key} = :id"
        )
        bindings = {"amount": step, "id": id}
        return self.storage.execute_update(sql, bindings, param_types(bindings))

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    def delete(self, id: int) -> Any:
        """Delete one row by primary key; return the affected count or False."""
        self._consume()
        _check_id(id)
        if not self._before(HookStage.BEFORE_DELETE, HookContext("delete", id=id)):
            return False

        where = {self.primary_key: id}
        result = self.storage.delete(self.table(), where, param_types(where))
        self.hooks.trigger(HookStage.AFTER_DELETE, HookContext("delete", id=id, result=result))
        return result

    def delete_by(self, *args: Any) -> Any:
        """Delete every row matching the given filters."""
        self._consume()
        spec = QuerySpec().where_args(*args)

        where = self._before(HookStage.BEFORE_DELETE, HookContext("delete_by", fields=dict(spec.filters)))
        if not where or not isinstance(where, Mapping):
            return False

        compiled = QuerySpec(dict(where)).compile_filters()
        if not compiled.clause:
            return False
        sql = f"DELETE FROM {self.table()} {compiled.sql}"
        result = self.storage.execute_update(sql, compiled.bindings, param_types(compiled.bindings))
        self.hooks.trigger(
            HookStage.AFTER_DELETE,
            HookContext("delete_by", fields=dict(where), result=result),
        )
        return result

    def delete_many(self, ids: Sequence[Any]) -> Any:
        """Delete every row in ``ids``; None for an empty list."""
        self._consume()
        ids = _check_ids(ids)
        if not ids:
            return None

        ids = self._before(HookStage.BEFORE_DELETE, HookContext("delete_many", ids=ids))
        if not ids or not isinstance(ids, (list, tuple)):
            return False

        bindings = {"values": list(ids)}
        sql = f"DELETE FROM {self.table()} WHERE {self.primary_key} IN (:values)"
        result = self.storage.execute_update(sql, bindings, param_types(bindings))
        self.hooks.trigger(
            HookStage.AFTER_DELETE,
            HookContext("delete_many", ids=list(ids), result=result),
        )
        return result

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def count_by(self, *args: Any, query: QuerySpec | None = None) -> int:
        """Number of rows matching the given filters. Bypasses find hooks."""
        spec = self._consume(query).where_args(*args)
        return self._count(spec)

    def count_all(self) -> int:
        """Number of rows in the table."""
        self._consume()
        return self._count(QuerySpec())

    def _count(self, spec: QuerySpec) -> int:
        compiled = spec.compile_filters()
        sql = f"SELECT COUNT({self.primary_key}) AS count FROM {self.table()} {compiled.sql}"
        row = self.storage.select(sql.strip(), compiled.bindings, param_types(compiled.bindings))
        if not row:
            return 0
        return int(row["count"])

    def is_unique(self, column: str, value: Any, exclude_id: Any = None) -> bool:
        """True when no row (other than ``exclude_id``) has ``column = value``."""
        self._consume()
        column, _ = Filter(column, value).parse()
        names = BindNames()
        name = names.allocate(column)

        sql = f"SELECT {self.primary_key} FROM {self.table()} WHERE {column} = :{name}"
        bindings = {name: value}
        if exclude_id is not None:
            ignore = names.allocate("exclude_id")
            sql += f" AND {self.primary_key} != :{ignore}"
            bindings[ignore] = exclude_id
        rows = self.storage.select(sql, bindings, param_types(bindings), fetch_all=True)
        return not rows

    def select(self, sql: str, bindings: Mapping[str, Any] | None = None, fetch_all: bool = False) -> Any:
        """Run a raw SELECT, shaping rows like the finders do."""
        spec = self._consume()
        return self._select(sql, dict(bindings or {}), spec, fetch_all=fetch_all)

    def table(self, name: str | None = None) -> str:
        """Prefixed table name (this model's, or ``name``)."""
        return f"{self.settings.table_prefix}{name or self.table_name}"

    def table_fields(self) -> tuple[str, ...]:
        """The bound table's columns, introspected once per instance."""
        return self._schema.get()

    def protect(self, column: str) -> RecordModel:
        """Never write ``column`` from caller-supplied data."""
        self._authorizer.protect(column)
        return self

    @property
    def protected(self) -> tuple[str, ...]:
        return tuple(self._authorizer.protected)

    @property
    def errors(self) -> dict[str, list[str]]:
        """Field-keyed messages from the last failed validation."""
        return self._gate.errors

    # ------------------------------------------------------------------
    # Validation and preparation
    # ------------------------------------------------------------------

    def validate(
        self,
        record: Any,
        operation: str = "update",
        skip_validation: bool | None = None,
    ) -> Result[dict[str, Any]]:
        return self._gate.validate(_as_mapping(record), operation, skip_validation)

    def _validated(self, record: Any, operation: str, skip_validation: bool | None) -> dict[str, Any] | None:
        result = self.validate(record, operation, skip_validation)
        if result.is_err():
            return None
        return result.unwrap()

    def prepare_data(self, record: Any) -> dict[str, Any]:
        """Strip primary-key, protected and non-column fields."""
        return self._authorizer.prepare_data(record)

    def protect_fields(self, row: Any) -> Any:
        return self._authorizer.protect_fields(row)

    # ------------------------------------------------------------------
    # Built-in hooks
    # ------------------------------------------------------------------

    def stamp_created(self, context: HookContext) -> Any:
        return stamp_record(context.fields, self.created_field, self.date_format)

    def stamp_modified(self, context: HookContext) -> Any:
        return stamp_record(context.fields, self.modified_field, self.date_format)

    def authorize_fields(self, context: HookContext) -> Any:
        return self._authorizer.authorize_fields(context)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _before(self, stage: HookStage, context: HookContext) -> Any:
        run = self.hooks.run(stage, context)
        if run.state is PipelineState.ABORTED:
            self._log.info("hook_rejected", stage=stage.value, method=context.method)
            return None
        return run.value

    def _select(
        self,
        sql: str,
        bindings: Mapping[str, Any],
        spec: QuerySpec,
        fetch_all: bool = False,
    ) -> Any:
        sql = normalize_whitespace(sql)
        self._log.debug("query_compiled", sql=sql, bindings=dict(bindings))
        result = self.storage.select(sql, bindings, param_types(bindings), fetch_all)
        if fetch_all:
            return [self._shape(row, spec) for row in result or []]
        return self._shape(result, spec) if result else result

    @staticmethod
    def _shape(row: Mapping[str, Any], spec: QuerySpec) -> Any:
        if spec.shape is ReturnShape.MAPPING:
            return dict(row)
        if spec.shape is ReturnShape.CLASS and spec.record_class is not None:
            return spec.record_class(**row)
        return SimpleNamespace(**row)


__all__ = [
    "RecordModel",
]
