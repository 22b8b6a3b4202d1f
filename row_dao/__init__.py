"""RowDAO - declarative table mapping, SQL generation and join-table relations."""

from __future__ import annotations

from row_dao.core.connection import ConnectionConfig, ConnectionManager
from row_dao.core.engine import Executor
from row_dao.core.enums import Cardinality, DatabaseBackend, FieldType, RelationState
from row_dao.core.exceptions import (
    AdapterError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    ExecutionError,
    HydrationError,
    MappingError,
    NameConflictError,
    NoPrimaryKeyError,
    NoRelationError,
    PoolError,
    PrimaryKeyMismatchError,
    RelationError,
    RowDaoError,
    StatementExecutionError,
    TooManyPredicatesError,
    UnknownFieldError,
)
from row_dao.core.registry import SchemaRegistry, default_registry
from row_dao.mapping.declarations import Column, column, persisted_base, table
from row_dao.mapping.hydrator import RowHydrator
from row_dao.mapping.metadata import (
    EntityMetadata,
    FieldDescriptor,
    FieldValue,
    build_metadata,
)
from row_dao.mapping.relations import Relation, RelationManager
from row_dao.mapping.statements import Statement
from row_dao.repository.dao import Dao

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Execution
    "Executor",
    # Declarations
    "table",
    "column",
    "persisted_base",
    "Column",
    # Mapping
    "EntityMetadata",
    "FieldDescriptor",
    "FieldValue",
    "build_metadata",
    "RowHydrator",
    "Statement",
    # Relations
    "Relation",
    "RelationManager",
    # Facade
    "Dao",
    # Registry
    "SchemaRegistry",
    "default_registry",
    # Enums
    "DatabaseBackend",
    "FieldType",
    "Cardinality",
    "RelationState",
    # Exceptions
    "RowDaoError",
    "ConfigurationError",
    "MappingError",
    "NoPrimaryKeyError",
    "PrimaryKeyMismatchError",
    "UnknownFieldError",
    "TooManyPredicatesError",
    "HydrationError",
    "RelationError",
    "NoRelationError",
    "NameConflictError",
    "ExecutionError",
    "StatementExecutionError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
