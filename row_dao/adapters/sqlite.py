"""SQLite adapter using stdlib sqlite3."""

from __future__ import annotations

import sqlite3
from typing import Any

from row_dao.core.connection import ConnectionConfig
from row_dao.core.enums import DEFAULT_TYPE_NAMES, FieldType


class SqliteAdapter:
    """SQLite adapter with foreign key enforcement switched on."""

    @property
    def paramstyle(self) -> str:
        return "named"

    @property
    def type_names(self) -> dict[FieldType, str]:
        return dict(DEFAULT_TYPE_NAMES)

    def create_pool(self, config: ConnectionConfig) -> list[sqlite3.Connection]:
        """Create a 'pool' (list of connections) for SQLite.

        Every connection to ``:memory:`` opens its own database, so in-memory
        setups should use ``pool_size=1``.
        """
        pool: list[sqlite3.Connection] = []
        for _ in range(config.pool_size):
            conn = sqlite3.connect(config.database, timeout=config.pool_timeout)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            # Relation tables rely on ON DELETE CASCADE
            conn.execute("PRAGMA foreign_keys=ON")
            pool.append(conn)
        return pool

    def acquire_connection(self, pool: list[sqlite3.Connection]) -> sqlite3.Connection:
        """Acquire a connection from the pool."""
        if not pool:
            raise RuntimeError("No connections available in pool")
        return pool.pop()

    def release_connection(
        self, connection: sqlite3.Connection, pool: list[sqlite3.Connection]
    ) -> None:
        """Release a connection back to the pool."""
        pool.append(connection)

    def close_pool(self, pool: list[sqlite3.Connection]) -> None:
        """Close all connections in the pool."""
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> sqlite3.Cursor:
        """Execute SQL and return a cursor."""
        return connection.execute(sql, params or {})
