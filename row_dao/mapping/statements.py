"""SQL statement builder.

Pure functions turning entity metadata (and runtime values) into
parameterized statements. Only validated identifiers and backend type names
are written into SQL text; every value is a bound parameter.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from row_dao.core.enums import DEFAULT_TYPE_NAMES, Cardinality, FieldType
from row_dao.core.exceptions import (
    NoPrimaryKeyError,
    PrimaryKeyMismatchError,
    TooManyPredicatesError,
    UnknownFieldError,
)
from row_dao.core.params import bind, placeholder
from row_dao.mapping.metadata import EntityMetadata, FieldDescriptor, FieldValue


@dataclass(frozen=True)
class Statement:
    """SQL text with ``:pN`` placeholders and the values bound to them, in order."""

    sql: str
    params: tuple[Any, ...] = ()

    def bindings(self) -> dict[str, Any]:
        """Parameters keyed by placeholder name."""
        return bind(self.params)


def _where(columns: Sequence[str], start: int = 0) -> str:
    """``a = :p0 AND b = :p1`` for *columns*, numbering from *start*."""
    return " AND ".join(
        f"{col} = {placeholder(start + i)}" for i, col in enumerate(columns)
    )


def _require_primary_key(metadata: EntityMetadata[Any]) -> None:
    if not metadata.primary_keys:
        raise NoPrimaryKeyError(metadata.table_name)


# --- Entity tables ---


def create_table(
    metadata: EntityMetadata[Any],
    type_names: Mapping[FieldType, str] = DEFAULT_TYPE_NAMES,
) -> Statement:
    """``CREATE TABLE IF NOT EXISTS`` with a composite primary key clause."""
    clauses = [f"{f.column} {type_names[f.field_type]}" for f in metadata.fields]
    if metadata.primary_keys:
        clauses.append(f"PRIMARY KEY ({', '.join(metadata.primary_key_columns)})")
    return Statement(f"CREATE TABLE IF NOT EXISTS {metadata.table_name} ({', '.join(clauses)})")


def drop_table(metadata: EntityMetadata[Any]) -> Statement:
    return Statement(f"DROP TABLE {metadata.table_name}")


def table_probe(table_name: str) -> Statement:
    """A query that succeeds, returning no rows, exactly when the table exists."""
    return Statement(f"SELECT * FROM {table_name} WHERE 1 = 0")


# --- Rows ---


def insert(metadata: EntityMetadata[Any], instance: Any) -> Statement:
    """Insert every mapped field of *instance*."""
    values = metadata.values(instance)
    columns = ", ".join(metadata.columns)
    placeholders = ", ".join(placeholder(i) for i in range(len(values)))
    return Statement(
        f"INSERT INTO {metadata.table_name} ({columns}) VALUES ({placeholders})",
        tuple(values),
    )


def select_all(metadata: EntityMetadata[Any]) -> Statement:
    return Statement(f"SELECT * FROM {metadata.table_name}")


def select_by_primary_key(
    metadata: EntityMetadata[Any], predicates: Sequence[FieldValue]
) -> Statement:
    """Select the row whose full primary key matches *predicates*.

    Raises:
        NoPrimaryKeyError: If the entity declares no primary key.
        PrimaryKeyMismatchError: If the predicates are not exactly the
            entity's primary key columns.
    """
    _require_primary_key(metadata)
    expected = len(metadata.primary_keys)
    if len(predicates) != expected:
        raise PrimaryKeyMismatchError(
            metadata.table_name,
            f"{len(predicates)} key values given, {expected} expected",
        )

    key_columns = set(metadata.primary_key_columns)
    seen: set[str] = set()
    for predicate in predicates:
        if predicate.column not in key_columns:
            raise PrimaryKeyMismatchError(
                metadata.table_name, f"'{predicate.column}' is not a primary key"
            )
        if predicate.column in seen:
            raise PrimaryKeyMismatchError(
                metadata.table_name, f"'{predicate.column}' is given more than once"
            )
        seen.add(predicate.column)

    where = _where([p.column for p in predicates])
    return Statement(
        f"SELECT * FROM {metadata.table_name} WHERE {where}",
        tuple(p.value for p in predicates),
    )


def select_where(metadata: EntityMetadata[Any], predicates: Sequence[FieldValue]) -> Statement:
    """Select rows matching every predicate; no predicates selects everything.

    Raises:
        TooManyPredicatesError: If there are more predicates than fields.
        UnknownFieldError: If a predicate names an unmapped column.
    """
    if not predicates:
        return select_all(metadata)
    if len(predicates) > len(metadata.fields):
        raise TooManyPredicatesError(metadata.table_name, len(predicates), len(metadata.fields))
    for predicate in predicates:
        if metadata.get_field(predicate.column) is None:
            raise UnknownFieldError(metadata.table_name, predicate.column)

    where = _where([p.column for p in predicates])
    return Statement(
        f"SELECT * FROM {metadata.table_name} WHERE {where}",
        tuple(p.value for p in predicates),
    )


def update(metadata: EntityMetadata[Any], instance: Any) -> Statement | None:
    """Update every non-key field of the row keyed by *instance*'s primary key.

    The primary key of *instance* is assumed to be the stored one. Returns
    None when every field is part of the key, as there is nothing to set.

    Raises:
        NoPrimaryKeyError: If the entity declares no primary key.
    """
    _require_primary_key(metadata)
    assigned = [f for f in metadata.fields if not f.primary_key]
    if not assigned:
        return None

    set_clause = ", ".join(
        f"{f.column} = {placeholder(i)}" for i, f in enumerate(assigned)
    )
    where = _where(metadata.primary_key_columns, start=len(assigned))
    values = metadata.values(instance, assigned) + metadata.values(
        instance, metadata.primary_keys
    )
    return Statement(
        f"UPDATE {metadata.table_name} SET {set_clause} WHERE {where}",
        tuple(values),
    )


def delete(metadata: EntityMetadata[Any], instance: Any) -> Statement:
    """Delete the row keyed by *instance*'s primary key.

    Raises:
        NoPrimaryKeyError: If the entity declares no primary key.
    """
    _require_primary_key(metadata)
    return Statement(
        f"DELETE FROM {metadata.table_name} WHERE {_where(metadata.primary_key_columns)}",
        tuple(metadata.values(instance, metadata.primary_keys)),
    )


def purge(metadata: EntityMetadata[Any]) -> Statement:
    """Delete every row, keeping the table."""
    return Statement(f"DELETE FROM {metadata.table_name}")


# --- Relation join tables ---


def join_columns(metadata: EntityMetadata[Any]) -> list[tuple[str, FieldDescriptor]]:
    """Join table columns standing for *metadata*'s primary key: ``<table><pk>``."""
    return [(f"{metadata.table_name}{pk.column}", pk) for pk in metadata.primary_keys]


def create_relation_table(
    name: str,
    cardinality: Cardinality,
    owner: EntityMetadata[Any],
    other: EntityMetadata[Any],
    type_names: Mapping[FieldType, str] = DEFAULT_TYPE_NAMES,
) -> Statement:
    """Join table for a relation, with cascading foreign keys to both sides.

    A one-to-one join table is keyed by the owner columns alone; a
    one-to-many table by owner and other columns together.
    """
    owner_columns = join_columns(owner)
    other_columns = join_columns(other)

    clauses = [
        f"{col} {type_names[pk.field_type]}" for col, pk in owner_columns + other_columns
    ]
    key = [col for col, _ in owner_columns]
    if cardinality is Cardinality.ONE_TO_MANY:
        key += [col for col, _ in other_columns]
    clauses.append(f"PRIMARY KEY ({', '.join(key)})")

    for metadata, columns in ((owner, owner_columns), (other, other_columns)):
        local = ", ".join(col for col, _ in columns)
        remote = ", ".join(pk.column for _, pk in columns)
        clauses.append(
            f"FOREIGN KEY ({local}) REFERENCES {metadata.table_name} ({remote}) "
            "ON DELETE CASCADE"
        )

    return Statement(f"CREATE TABLE IF NOT EXISTS {name} ({', '.join(clauses)})")


def insert_link(
    name: str,
    owner: EntityMetadata[Any],
    other: EntityMetadata[Any],
    owner_instance: Any,
    other_instance: Any,
) -> Statement:
    """Insert the join row pairing *owner_instance* with *other_instance*."""
    columns = [col for col, _ in join_columns(owner) + join_columns(other)]
    values = owner.values(owner_instance, owner.primary_keys) + other.values(
        other_instance, other.primary_keys
    )
    placeholders = ", ".join(placeholder(i) for i in range(len(values)))
    return Statement(
        f"INSERT INTO {name} ({', '.join(columns)}) VALUES ({placeholders})",
        tuple(values),
    )


def delete_link(
    name: str,
    owner: EntityMetadata[Any],
    other: EntityMetadata[Any],
    owner_instance: Any,
    other_instance: Any,
) -> Statement:
    """Delete the join row pairing *owner_instance* with *other_instance*."""
    columns = [col for col, _ in join_columns(owner) + join_columns(other)]
    values = owner.values(owner_instance, owner.primary_keys) + other.values(
        other_instance, other.primary_keys
    )
    return Statement(f"DELETE FROM {name} WHERE {_where(columns)}", tuple(values))


def select_links(name: str, owner: EntityMetadata[Any], owner_instance: Any) -> Statement:
    """Select the join rows of *owner_instance*."""
    columns = [col for col, _ in join_columns(owner)]
    return Statement(
        f"SELECT * FROM {name} WHERE {_where(columns)}",
        tuple(owner.values(owner_instance, owner.primary_keys)),
    )
