"""Tests for recordspine.schema (SchemaFieldList, FieldAuthorizer)."""

from __future__ import annotations

import threading
from types import SimpleNamespace

import pytest

from recordspine.errors import ConfigurationError, InvalidArgumentError
from recordspine.hooks import HookContext
from recordspine.schema import FieldAuthorizer, SchemaFieldList


class CountingLoader:
    def __init__(self, columns):
        self.columns = columns
        self.calls = 0

    def __call__(self, table):
        self.calls += 1
        return list(self.columns)


class TestSchemaFieldList:
    def test_loads_once(self):
        loader = CountingLoader(["id", "name"])
        schema = SchemaFieldList("users", loader)
        assert not schema.loaded

        assert schema.get() == ("id", "name")
        assert "name" in schema
        assert list(schema) == ["id", "name"]
        assert loader.calls == 1
        assert schema.loaded

    def test_empty_introspection_is_fatal(self):
        schema = SchemaFieldList("missing_table", CountingLoader([]))
        with pytest.raises(ConfigurationError) as exc_info:
            schema.get()
        assert exc_info.value.context == {"table": "missing_table"}
        assert not schema.loaded

    def test_concurrent_first_access_loads_once(self):
        loader = CountingLoader(["id"])
        schema = SchemaFieldList("users", loader)
        barrier = threading.Barrier(8)

        def read():
            barrier.wait()
            schema.get()

        threads = [threading.Thread(target=read) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert loader.calls == 1


class TestFieldAuthorizer:
    @pytest.fixture
    def authorizer(self):
        schema = SchemaFieldList("users", CountingLoader(["id", "name", "email", "password_hash"]))
        return FieldAuthorizer(schema, "id", protected=("password_hash",))

    def test_prepare_drops_pk_protected_and_unknown(self, authorizer):
        prepared = authorizer.prepare_data(
            {"id": 9, "name": "x", "password_hash": "h", "nickname": "n"}
        )
        assert prepared == {"name": "x"}

    def test_prepare_accepts_attributed_records(self, authorizer):
        assert authorizer.prepare_data(SimpleNamespace(name="x", id=1)) == {"name": "x"}

    def test_prepare_empty(self, authorizer):
        assert authorizer.prepare_data({}) == {}
        assert authorizer.prepare_data(None) == {}

    def test_protect_fields_mapping(self, authorizer):
        assert authorizer.protect_fields({"name": "x", "password_hash": "h"}) == {"name": "x"}

    def test_protect_fields_object_is_copied(self, authorizer):
        row = SimpleNamespace(name="x", password_hash="h")
        stripped = authorizer.protect_fields(row)
        assert not hasattr(stripped, "password_hash")
        assert row.password_hash == "h"

    def test_authorize_hook(self, authorizer):
        context = HookContext("insert", fields={"name": "x", "password_hash": "h"})
        assert authorizer.authorize_fields(context) == {"name": "x"}
        assert authorizer.authorize_fields(HookContext("insert", fields={})) is None

    def test_protect(self, authorizer):
        authorizer.protect("email")
        authorizer.protect("email")
        assert authorizer.protected == ["password_hash", "email"]
        assert authorizer.prepare_data({"name": "x", "email": "e"}) == {"name": "x"}

    def test_protect_rejects_empty(self, authorizer):
        with pytest.raises(InvalidArgumentError):
            authorizer.protect("")
