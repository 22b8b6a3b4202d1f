"""Oracle adapter using oracledb.

Generated DDL uses ``CREATE TABLE IF NOT EXISTS`` and ``BOOLEAN`` columns,
both of which need Oracle Database 23ai or later.
"""

from __future__ import annotations

from typing import Any

from row_dao.core.connection import ConnectionConfig
from row_dao.core.enums import DEFAULT_TYPE_NAMES, FieldType


def _build_dsn(config: ConnectionConfig) -> str:
    """Build an Oracle DSN string from config fields (host:port/database)."""
    return f"{config.host}:{config.port}/{config.database}"


def _make_row_factory(cursor: Any) -> Any:
    """Create a row factory that converts tuples to dicts using column names."""
    columns = [col[0].lower() for col in cursor.description]

    def factory(*args: Any) -> dict[str, Any]:
        return dict(zip(columns, args, strict=True))

    return factory


class OracleAdapter:
    """Oracle adapter using oracledb in thin mode."""

    @property
    def paramstyle(self) -> str:
        return "named"

    @property
    def type_names(self) -> dict[FieldType, str]:
        names = dict(DEFAULT_TYPE_NAMES)
        names[FieldType.INT] = "NUMBER(10)"
        names[FieldType.FLOAT] = "BINARY_FLOAT"
        names[FieldType.DOUBLE] = "BINARY_DOUBLE"
        names[FieldType.VARCHAR] = "VARCHAR2(255)"
        names[FieldType.LONG_VARCHAR] = "VARCHAR2(1023)"
        return names

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        """Create a 'pool' (list of connections) for Oracle."""
        import oracledb

        dsn = _build_dsn(config)
        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = oracledb.connect(user=config.user, password=config.password, dsn=dsn)
            pool.append(conn)
        return pool

    def acquire_connection(self, pool: list[Any]) -> Any:
        """Acquire a connection from the pool."""
        if not pool:
            raise RuntimeError("No connections available in pool")
        return pool.pop()

    def release_connection(self, connection: Any, pool: list[Any]) -> None:
        """Release a connection back to the pool."""
        pool.append(connection)

    def close_pool(self, pool: list[Any]) -> None:
        """Close all connections in the pool."""
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute SQL and return a cursor with dict row factory."""
        cursor = connection.cursor()
        cursor.execute(sql, params or {})
        if cursor.description is not None:
            cursor.rowfactory = _make_row_factory(cursor)
        return cursor
