"""Row-to-entity hydration.

A RowHydrator allocates a blank instance through the entity's no-argument
factory, then assigns every mapped field from the row, converted per its
declared field type.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from row_dao.core.exceptions import HydrationError
from row_dao.mapping.metadata import EntityMetadata, FieldDescriptor

T = TypeVar("T")


def column_value(row: dict[str, Any], column: str) -> Any:
    """Read *column* from *row*.

    Falls back to a case-insensitive match for engines that fold unquoted
    identifiers (PostgreSQL lower-cases, Oracle upper-cases).

    Raises:
        KeyError: If the row has no such column.
    """
    if column in row:
        return row[column]
    lowered = column.lower()
    for key, value in row.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    raise KeyError(column)


def read_field(row: dict[str, Any], descriptor: FieldDescriptor) -> Any:
    """Typed read of one field; the raw value is kept if conversion fails."""
    raw = column_value(row, descriptor.column)
    if raw is None:
        return None
    try:
        return descriptor.field_type.converter(raw)
    except (TypeError, ValueError):
        return raw


class RowHydrator(Generic[T]):
    """Maps result rows to instances of one entity class.

    Args:
        metadata: Metadata of the entity to build.
    """

    def __init__(self, metadata: EntityMetadata[T]) -> None:
        self._metadata = metadata
        self._class_name = metadata.entity_class.__name__

    def map_one(self, row: dict[str, Any]) -> T:
        """Map a single row to a new entity instance.

        Raises:
            HydrationError: If the instance cannot be created, a column is
                missing from the row, or a field cannot be assigned.
        """
        try:
            instance = self._metadata.factory()
        except Exception as e:
            raise HydrationError(self._class_name, f"factory failed: {e}") from e

        for descriptor in self._metadata.fields:
            try:
                value = read_field(row, descriptor)
            except KeyError:
                raise HydrationError(
                    self._class_name, f"row has no column '{descriptor.column}'"
                ) from None
            try:
                descriptor.setter(instance, value)
            except Exception as e:
                raise HydrationError(
                    self._class_name, f"cannot assign '{descriptor.attribute}': {e}"
                ) from e
        return instance

    def map_many(self, rows: list[dict[str, Any]]) -> list[T]:
        """Map all rows via map_one; one bad row fails the whole call."""
        return [self.map_one(row) for row in rows]
