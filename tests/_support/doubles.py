"""Recording storage double and the record models the tests exercise."""

from __future__ import annotations

from typing import Any

from recordspine.model import RecordModel

USER_COLUMNS = (
    "id",
    "name",
    "email",
    "age",
    "status",
    "password_hash",
    "created_on",
    "modified_on",
)

USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    email TEXT UNIQUE,
    age INTEGER,
    status INTEGER DEFAULT 1,
    password_hash TEXT,
    created_on TEXT,
    modified_on TEXT
)
"""


class FakeStorage:
    """Storage double: records every call, returns canned results."""

    def __init__(self, columns: tuple[str, ...] = USER_COLUMNS):
        self.columns = list(columns)
        self.calls: list[tuple] = []
        self.select_result: Any = None
        self.insert_result: Any = 1
        self.write_result: Any = 1

    def select(self, query, bindings, param_types, fetch_all=False):
        self.calls.append(("select", query, dict(bindings), dict(param_types), fetch_all))
        result = self.select_result
        if fetch_all:
            if result is None:
                return []
            return [result] if isinstance(result, dict) else list(result)
        if isinstance(result, list):
            return result[0] if result else None
        return result

    def insert(self, table, record, param_types):
        self.calls.append(("insert", table, dict(record)))
        return self.insert_result

    def replace(self, table, record, param_types):
        self.calls.append(("replace", table, dict(record)))
        return self.insert_result

    def update(self, table, record, where, param_types):
        self.calls.append(("update", table, dict(record), dict(where)))
        return self.write_result

    def delete(self, table, where, param_types):
        self.calls.append(("delete", table, dict(where)))
        return self.write_result

    def execute_update(self, query, bindings, param_types):
        self.calls.append(("execute_update", query, dict(bindings), dict(param_types)))
        return self.write_result

    def list_columns(self, table):
        self.calls.append(("list_columns", table))
        return list(self.columns)

    def of(self, kind: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == kind]

    def last(self, kind: str) -> tuple:
        matches = self.of(kind)
        assert matches, f"no {kind} call recorded"
        return matches[-1]


class Users(RecordModel):
    table_name = "users"
    return_type = "array"


class ValidatedUsers(RecordModel):
    table_name = "users"
    return_type = "array"
    validate_rules = {
        "name": "trim|max_length[20]",
        "email": "trim|valid_email",
    }
    validate_insert_rules = {
        "email": "required",
    }
    protected_fields = ("password_hash",)

