"""Tests for recordspine.storage against an in-memory SQLite engine."""

from __future__ import annotations

import pytest

from recordspine.errors import StorageError
from recordspine.protocols import ParamType, Storage, param_types
from recordspine.storage import SQLAlchemyStorage, create_storage

pytestmark = pytest.mark.integration


class TestParamTypes:
    def test_hints(self):
        hints = param_types({"a": 1, "b": "x", "c": [1, 2], "d": ["x", 1], "e": True})
        assert hints == {
            "a": ParamType.INT,
            "b": ParamType.STR,
            "c": ParamType.INT_ARRAY,
            "d": ParamType.STR_ARRAY,
            "e": ParamType.STR,
        }


class TestCreateStorage:
    def test_memory_url(self):
        storage = create_storage("sqlite://")
        assert isinstance(storage, SQLAlchemyStorage)
        assert isinstance(storage, Storage)
        storage.engine.dispose()


class TestSQLAlchemyStorage:
    def test_list_columns(self, storage):
        assert list(storage.list_columns("users")) == [
            "id", "name", "email", "age", "status", "password_hash", "created_on", "modified_on",
        ]

    def test_list_columns_missing_table(self, storage):
        assert list(storage.list_columns("nope")) == []

    def test_insert_returns_generated_id(self, storage):
        first = storage.insert("users", {"name": "ada"}, {})
        second = storage.insert("users", {"name": "bob"}, {})
        assert (first, second) == (1, 2)

    def test_select_one_and_all(self, storage, seeded):
        row = storage.select("SELECT * FROM users WHERE name = :name", {"name": "bob"}, {})
        assert row["age"] == 17

        rows = storage.select("SELECT name FROM users ORDER BY name", {}, {}, fetch_all=True)
        assert [r["name"] for r in rows] == ["ada", "bob", "cy"]

        assert storage.select("SELECT * FROM users WHERE id = :id", {"id": 99}, {}) is None

    def test_select_one_takes_the_first_row(self, storage, seeded):
        row = storage.select("SELECT name FROM users ORDER BY name", {}, {})
        assert row == {"name": "ada"}

    def test_select_expands_arrays(self, storage, seeded):
        bindings = {"values": [1, 3]}
        rows = storage.select(
            "SELECT id FROM users WHERE id IN (:values) ORDER BY id",
            bindings,
            param_types(bindings),
            fetch_all=True,
        )
        assert [r["id"] for r in rows] == [1, 3]

    def test_update_and_delete_return_rowcount(self, storage, seeded):
        assert storage.update("users", {"status": 5}, {"status": 1}, {}) == 2
        assert storage.update("users", {"status": 5}, {"id": 99}, {}) == 0
        assert storage.delete("users", {"id": 3}, {}) == 1

    def test_update_without_where_touches_every_row(self, storage, seeded):
        assert storage.update("users", {"status": 9}, {}, {}) == 3

    def test_execute_update(self, storage, seeded):
        bindings = {"amount": 2, "values": [1, 2]}
        count = storage.execute_update(
            "UPDATE users SET age = age + :amount WHERE id IN (:values)",
            bindings,
            param_types(bindings),
        )
        assert count == 2
        row = storage.select("SELECT age FROM users WHERE id = 1", {}, {})
        assert row["age"] == 38

    def test_replace(self, storage, seeded):
        key = storage.replace("users", {"id": 2, "name": "robert", "email": "bob@example.com"}, {})
        assert key == 2
        row = storage.select("SELECT name, age FROM users WHERE id = 2", {}, {})
        assert row == {"name": "robert", "age": None}

    def test_driver_failure_raises_storage_error(self, storage):
        with pytest.raises(StorageError) as exc_info:
            storage.select("SELECT * FROM nope", {}, {})
        assert exc_info.value.sql == "SELECT * FROM nope"
        assert exc_info.value.__cause__ is not None

    def test_unique_violation_raises_storage_error(self, storage, seeded):
        with pytest.raises(StorageError):
            storage.insert("users", {"email": "ada@example.com"}, {})
