"""RowDAO exception hierarchy.

All exceptions are RowDAO-specific. Raw driver exceptions are wrapped and
never exposed to callers.
"""

from __future__ import annotations


class RowDaoError(Exception):
    """Base exception for all RowDAO errors."""


# --- Configuration ---


class ConfigurationError(RowDaoError):
    """Raised when an entity class cannot be mapped."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        super().__init__(f"Cannot map '{target_class}': {detail}")


# --- Mapping ---


class MappingError(RowDaoError):
    """Base for mapping errors."""


class NoPrimaryKeyError(MappingError):
    """Raised when an operation needs a primary key the entity does not declare."""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        super().__init__(f"Table '{table_name}' declares no primary key")


class PrimaryKeyMismatchError(MappingError):
    """Raised when a primary-key lookup receives the wrong key columns."""

    def __init__(self, table_name: str, detail: str) -> None:
        self.table_name = table_name
        super().__init__(f"Primary key mismatch for '{table_name}': {detail}")


class UnknownFieldError(MappingError):
    """Raised when a predicate names a column the entity does not map."""

    def __init__(self, table_name: str, column: str) -> None:
        self.table_name = table_name
        self.column = column
        super().__init__(f"Table '{table_name}' has no column named '{column}'")


class TooManyPredicatesError(MappingError):
    """Raised when more predicates are given than the entity has fields."""

    def __init__(self, table_name: str, given: int, available: int) -> None:
        self.table_name = table_name
        self.given = given
        self.available = available
        super().__init__(
            f"{given} predicates given for '{table_name}', which maps only {available} fields"
        )


class HydrationError(MappingError):
    """Raised when a row cannot be turned into an entity instance."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        super().__init__(f"Cannot hydrate {target_class}: {detail}")


# --- Relations ---


class RelationError(RowDaoError):
    """Base for relation errors."""


class NoRelationError(RelationError):
    """Raised when a relation operation names a relation the entity does not own."""

    def __init__(self, table_name: str, relation: str) -> None:
        self.table_name = table_name
        self.relation = relation
        super().__init__(f"Table '{table_name}' has no relation {relation}")


class NameConflictError(RelationError):
    """Raised when a table or relation name is already reserved."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A table or relation named '{name}' already exists")


# --- Execution ---


class ExecutionError(RowDaoError):
    """Base for statement execution errors."""


class StatementExecutionError(ExecutionError):
    """Raised when the database rejects a generated statement."""

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        super().__init__(f"Statement failed: {detail} [{sql}]")


# --- Adapter ---


class AdapterError(RowDaoError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
