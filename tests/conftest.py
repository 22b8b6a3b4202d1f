"""Shared test fixtures."""

from __future__ import annotations

import pytest

from row_dao.core.connection import ConnectionConfig, ConnectionManager
from row_dao.core.registry import SchemaRegistry


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config.

    A single connection, since each ``:memory:`` connection is its own database.
    """
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def manager(sqlite_config: ConnectionConfig):
    """Connection manager over an in-memory SQLite database."""
    cm = ConnectionManager(sqlite_config)
    yield cm
    cm.close_pool()


@pytest.fixture
def schema() -> SchemaRegistry:
    """A fresh name registry, so tests never collide on table names."""
    return SchemaRegistry()
