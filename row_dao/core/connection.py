"""Connection configuration and management.

ConnectionConfig is a Pydantic model for type-safe connection config.
ConnectionManager loads the backend adapter for the configured driver and
hands out pooled connections as context managers.
"""

from __future__ import annotations

import importlib
import logging
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel

from row_dao.core.enums import DatabaseBackend
from row_dao.core.exceptions import AdapterError, PoolError

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    pool_size: int = 5
    pool_timeout: int = 30
    extra: dict[str, Any] = {}


# Adapter module mapping: backend → (module_path, adapter_class)
_ADAPTER_MAP: dict[DatabaseBackend, tuple[str, str]] = {
    DatabaseBackend.SQLITE: ("row_dao.adapters.sqlite", "SqliteAdapter"),
    DatabaseBackend.POSTGRESQL: ("row_dao.adapters.postgresql", "PostgresqlAdapter"),
    DatabaseBackend.MYSQL: ("row_dao.adapters.mysql", "MysqlAdapter"),
    DatabaseBackend.ORACLE: ("row_dao.adapters.oracle", "OracleAdapter"),
}


def _load_adapter(driver: str) -> Any:
    """Load an adapter by driver name."""
    try:
        backend = DatabaseBackend(driver.lower())
    except ValueError:
        raise AdapterError(f"Unsupported database driver: {driver}") from None

    module_path, cls_name = _ADAPTER_MAP[backend]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


class ConnectionManager:
    """Connection manager using the SyncAdapter protocol."""

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._adapter = _load_adapter(config.driver)
        self._pool: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    def initialize_pool(self) -> Any:
        """Initialize the connection pool."""
        if self._pool is None:
            try:
                self._pool = self._adapter.create_pool(self.config)
            except Exception as e:
                raise PoolError(f"Failed to create pool for '{self.config.driver}': {e}") from e
            logger.debug(
                f"Created {self.config.driver} pool of {self.config.pool_size} connections"
            )
        return self._pool

    @contextmanager
    def get_connection(self):  # type: ignore[no-untyped-def]
        """Get a connection from the pool as a context manager."""
        if self._pool is None:
            self.initialize_pool()
        try:
            connection = self._adapter.acquire_connection(self._pool)
        except RuntimeError as e:
            raise PoolError(str(e)) from e
        try:
            yield connection
        finally:
            self._adapter.release_connection(connection, self._pool)

    def close_pool(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            self._adapter.close_pool(self._pool)
            self._pool = None
            logger.debug(f"Closed {self.config.driver} pool")
