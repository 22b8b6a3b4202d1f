"""Statement execution.

The Executor runs built statements through the adapter on a pooled
connection. Every cursor is closed and every connection released on each
exit path; driver errors come back as StatementExecutionError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import closing, contextmanager
from typing import TYPE_CHECKING, Any

from row_dao.core.connection import ConnectionConfig, ConnectionManager
from row_dao.core.enums import FieldType
from row_dao.core.exceptions import AdapterError, StatementExecutionError
from row_dao.core.params import normalize_params

if TYPE_CHECKING:
    from row_dao.mapping.statements import Statement

logger = logging.getLogger(__name__)


def _rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor results to list of dicts.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    rows = cursor.fetchall()
    if not rows:
        return []

    # Check if rows are already dict-like (e.g., psycopg dict_row, MySQL dict cursor)
    first_row = rows[0]
    if isinstance(first_row, dict):
        return [dict(row) for row in rows]

    # Tuple-like rows, zip with columns
    return [dict(zip(columns, row, strict=True)) for row in rows]


def _rollback(connection: Any) -> None:
    """Roll back after a failed statement, keeping the original error primary."""
    try:
        connection.rollback()
    except Exception as e:
        logger.debug(f"Rollback after failed statement also failed: {e}")


class Executor:
    """Synchronous statement executor."""

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self._connection_manager = connection_manager
        self._adapter = connection_manager.adapter
        self._paramstyle = self._adapter.paramstyle

    @classmethod
    def from_config(cls, config: ConnectionConfig) -> Executor:
        """Create an Executor from a ConnectionConfig."""
        return cls(ConnectionManager(config))

    @property
    def connection_manager(self) -> ConnectionManager:
        return self._connection_manager

    @property
    def type_names(self) -> dict[FieldType, str]:
        """SQL type spelling for the connected backend."""
        return self._adapter.type_names

    @contextmanager
    def _connection(self, statement: Statement) -> Iterator[Any]:
        """A pooled connection; pool and connection failures fail the statement."""
        try:
            with self._connection_manager.get_connection() as conn:
                yield conn
        except AdapterError as e:
            raise StatementExecutionError(statement.sql, str(e)) from e

    def execute(self, statement: Statement) -> int:
        """Execute a write or DDL statement and commit. Returns affected row count.

        Raises:
            StatementExecutionError: If no connection can be obtained or the
                database rejects the statement.
        """
        sql = normalize_params(statement.sql, self._paramstyle)
        logger.debug(f"Executing: {statement.sql} ({len(statement.params)} params)")

        with self._connection(statement) as conn:
            try:
                with closing(self._adapter.execute(conn, sql, statement.bindings())) as cursor:
                    rowcount = int(cursor.rowcount)
                conn.commit()
            except Exception as e:
                _rollback(conn)
                raise StatementExecutionError(statement.sql, str(e)) from e

        return rowcount

    def fetch_all(self, statement: Statement) -> list[dict[str, Any]]:
        """Execute a query and return every row as a dict.

        Raises:
            StatementExecutionError: If no connection can be obtained or the
                database rejects the statement.
        """
        sql = normalize_params(statement.sql, self._paramstyle)
        logger.debug(f"Querying: {statement.sql} ({len(statement.params)} params)")

        with self._connection(statement) as conn:
            try:
                with closing(self._adapter.execute(conn, sql, statement.bindings())) as cursor:
                    rows = _rows_to_dicts(cursor)
                # End the read transaction; pooled connections must see later commits
                conn.rollback()
            except Exception as e:
                _rollback(conn)
                raise StatementExecutionError(statement.sql, str(e)) from e

        logger.debug(f"Query returned {len(rows)} rows")
        return rows
