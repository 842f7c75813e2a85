"""
Shared pytest fixtures for recordspine tests.

This module provides:
- An in-memory SQLite engine with a ``users`` table (StaticPool, one connection)
- A recording ``FakeStorage`` (see ``tests._support.doubles``)
- ``Users`` / ``ValidatedUsers`` model instances bound to either

Usage:
    def test_something(users, fake):
        users.find(1)
        assert fake.of("select")
"""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from recordspine.settings import RecordSettings
from recordspine.storage import SQLAlchemyStorage
from tests._support.doubles import USERS_DDL, FakeStorage, Users, ValidatedUsers


@pytest.fixture
def settings() -> RecordSettings:
    """Settings isolated from the environment and any .env file."""
    return RecordSettings(_env_file=None)


@pytest.fixture
def fake() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def users(fake, settings) -> Users:
    return Users(fake, settings=settings)


@pytest.fixture
def validated_users(fake, settings) -> ValidatedUsers:
    return ValidatedUsers(fake, settings=settings)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        conn.execute(text(USERS_DDL))
    yield engine
    engine.dispose()


@pytest.fixture
def storage(engine) -> SQLAlchemyStorage:
    return SQLAlchemyStorage(engine)


@pytest.fixture
def db_users(storage, settings) -> Users:
    return Users(storage, settings=settings)


@pytest.fixture
def seeded(engine) -> None:
    """Three users: ada (36, active), bob (17, active), cy (52, inactive)."""
    with engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO users (name, email, age, status) VALUES "
                "('ada', 'ada@example.com', 36, 1), "
                "('bob', 'bob@example.com', 17, 1), "
                "('cy', 'cy@example.com', 52, 0)"
            )
        )
