"""Backend, column type and relation enumerations."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    ORACLE = "oracle"


class FieldType(Enum):
    """SQL column types a mapped field can be declared with.

    Each member carries its default SQL spelling, the converter used when
    reading a column back, and the zero value used as a declaration default.
    """

    BOOLEAN = ("BOOLEAN", bool, False)
    INT = ("INT", int, 0)
    FLOAT = ("FLOAT", float, 0.0)
    DOUBLE = ("DOUBLE", float, 0.0)
    CHAR = ("CHAR(1)", str, "")
    VARCHAR = ("VARCHAR(255)", str, "")
    LONG_VARCHAR = ("VARCHAR(1023)", str, "")

    def __init__(self, sql: str, converter: Callable[[Any], Any], zero: Any) -> None:
        self.sql = sql
        self.converter = converter
        self.zero = zero


class Cardinality(Enum):
    """Cardinality of a relation between two entities."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"


class RelationState(Enum):
    """Lifecycle of a relation's join table."""

    REGISTERED = "registered"
    MATERIALIZED = "materialized"


# SQL spelling of each field type on engines that accept the standard names
DEFAULT_TYPE_NAMES: dict[FieldType, str] = {field_type: field_type.sql for field_type in FieldType}
