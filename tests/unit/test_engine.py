"""Unit tests for the Executor."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from row_dao.core.connection import ConnectionConfig, ConnectionManager
from row_dao.core.engine import Executor
from row_dao.core.enums import FieldType
from row_dao.core.exceptions import StatementExecutionError
from row_dao.mapping.statements import Statement


@pytest.fixture
def executor(manager: ConnectionManager) -> Executor:
    ex = Executor(manager)
    ex.execute(Statement("CREATE TABLE item (id INT PRIMARY KEY, name VARCHAR(255))"))
    return ex


@pytest.fixture
def mock_adapter() -> MagicMock:
    adapter = MagicMock()
    adapter.paramstyle = "pyformat"
    adapter.create_pool.return_value = MagicMock(name="pool")
    return adapter


@pytest.fixture
def mock_executor(mock_adapter: MagicMock) -> Executor:
    config = ConnectionConfig(driver="postgresql", database="test")
    with patch("row_dao.core.connection._load_adapter", return_value=mock_adapter):
        manager = ConnectionManager(config)
    return Executor(manager)


class TestExecutorSqlite:
    def test_execute_returns_rowcount(self, executor: Executor) -> None:
        count = executor.execute(
            Statement("INSERT INTO item (id, name) VALUES (:p0, :p1)", (1, "bolt"))
        )
        assert count == 1

    def test_fetch_all_returns_dicts(self, executor: Executor) -> None:
        executor.execute(Statement("INSERT INTO item (id, name) VALUES (:p0, :p1)", (1, "bolt")))
        executor.execute(Statement("INSERT INTO item (id, name) VALUES (:p0, :p1)", (2, "nut")))
        rows = executor.fetch_all(Statement("SELECT * FROM item WHERE id = :p0", (2,)))
        assert rows == [{"id": 2, "name": "nut"}]

    def test_fetch_all_empty(self, executor: Executor) -> None:
        assert executor.fetch_all(Statement("SELECT * FROM item")) == []

    def test_rejected_statement(self, executor: Executor) -> None:
        executor.execute(Statement("INSERT INTO item (id, name) VALUES (:p0, :p1)", (1, "bolt")))
        statement = Statement("INSERT INTO item (id, name) VALUES (:p0, :p1)", (1, "again"))
        with pytest.raises(StatementExecutionError) as info:
            executor.execute(statement)
        assert info.value.sql == statement.sql

    def test_failed_query(self, executor: Executor) -> None:
        with pytest.raises(StatementExecutionError, match="missing"):
            executor.fetch_all(Statement("SELECT * FROM missing"))

    def test_connection_released_after_failure(self, executor: Executor) -> None:
        for _ in range(3):
            with pytest.raises(StatementExecutionError):
                executor.fetch_all(Statement("SELECT * FROM missing"))
        assert executor.fetch_all(Statement("SELECT * FROM item")) == []

    def test_type_names(self, executor: Executor) -> None:
        assert executor.type_names[FieldType.VARCHAR] == "VARCHAR(255)"

    def test_unopenable_database(self, tmp_path: Path) -> None:
        config = ConnectionConfig(
            driver="sqlite", database=str(tmp_path / "missing" / "x.db"), pool_size=1
        )
        ex = Executor(ConnectionManager(config))
        statement = Statement("DELETE FROM item")
        with pytest.raises(StatementExecutionError, match="unable to open") as info:
            ex.execute(statement)
        assert info.value.sql == statement.sql
        with pytest.raises(StatementExecutionError):
            ex.fetch_all(Statement("SELECT * FROM item"))

    def test_from_config(self, sqlite_config: ConnectionConfig) -> None:
        ex = Executor.from_config(sqlite_config)
        try:
            assert ex.fetch_all(Statement("SELECT 1 AS one")) == [{"one": 1}]
        finally:
            ex.connection_manager.close_pool()


class TestExecutorMocked:
    def test_pyformat_conversion_and_bindings(
        self, mock_executor: Executor, mock_adapter: MagicMock
    ) -> None:
        cursor = MagicMock(rowcount=1)
        mock_adapter.execute.return_value = cursor
        mock_executor.execute(Statement("DELETE FROM item WHERE id = :p0", (5,)))

        _, sql, params = mock_adapter.execute.call_args.args
        assert sql == "DELETE FROM item WHERE id = %(p0)s"
        assert params == {"p0": 5}

    def test_execute_commits_and_closes_cursor(
        self, mock_executor: Executor, mock_adapter: MagicMock
    ) -> None:
        conn = MagicMock()
        cursor = MagicMock(rowcount=2)
        mock_adapter.acquire_connection.return_value = conn
        mock_adapter.execute.return_value = cursor

        assert mock_executor.execute(Statement("DELETE FROM item")) == 2
        cursor.close.assert_called_once()
        conn.commit.assert_called_once()
        mock_adapter.release_connection.assert_called_once()

    def test_tuple_rows_zipped_with_columns(
        self, mock_executor: Executor, mock_adapter: MagicMock
    ) -> None:
        cursor = MagicMock()
        cursor.description = [("id",), ("name",)]
        cursor.fetchall.return_value = [(1, "bolt"), (2, "nut")]
        mock_adapter.execute.return_value = cursor

        rows = mock_executor.fetch_all(Statement("SELECT * FROM item"))
        assert rows == [{"id": 1, "name": "bolt"}, {"id": 2, "name": "nut"}]
        cursor.close.assert_called_once()

    def test_failure_rolls_back_and_releases(
        self, mock_executor: Executor, mock_adapter: MagicMock
    ) -> None:
        conn = MagicMock()
        mock_adapter.acquire_connection.return_value = conn
        mock_adapter.execute.side_effect = RuntimeError("server closed the connection")

        with pytest.raises(StatementExecutionError, match="server closed"):
            mock_executor.execute(Statement("DELETE FROM item"))
        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()
        mock_adapter.release_connection.assert_called_once()

    def test_failed_rollback_keeps_original_error(
        self, mock_executor: Executor, mock_adapter: MagicMock
    ) -> None:
        conn = MagicMock()
        conn.rollback.side_effect = RuntimeError("rollback failed")
        mock_adapter.acquire_connection.return_value = conn
        mock_adapter.execute.side_effect = RuntimeError("syntax error")

        with pytest.raises(StatementExecutionError, match="syntax error"):
            mock_executor.fetch_all(Statement("SELEC 1"))

    def test_fetch_all_ends_read_transaction(
        self, mock_executor: Executor, mock_adapter: MagicMock
    ) -> None:
        conn = MagicMock()
        cursor = MagicMock()
        cursor.description = [("id",)]
        cursor.fetchall.return_value = [(1,)]
        mock_adapter.acquire_connection.return_value = conn
        mock_adapter.execute.return_value = cursor

        mock_executor.fetch_all(Statement("SELECT * FROM item"))
        mock_executor.fetch_all(Statement("SELECT * FROM item"))

        assert conn.rollback.call_count == 2
        conn.commit.assert_not_called()

    def test_exhausted_pool_fails_the_statement(
        self, mock_executor: Executor, mock_adapter: MagicMock
    ) -> None:
        mock_adapter.acquire_connection.side_effect = RuntimeError(
            "No connections available in pool"
        )
        with pytest.raises(StatementExecutionError, match="No connections available"):
            mock_executor.execute(Statement("DELETE FROM item"))
        mock_adapter.execute.assert_not_called()
