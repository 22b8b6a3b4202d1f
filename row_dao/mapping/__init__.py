"""Mapping layer - declarations, metadata, statements, relations and hydration."""

from __future__ import annotations

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

__all__ = [
    "Column",
    "column",
    "table",
    "persisted_base",
    "EntityMetadata",
    "FieldDescriptor",
    "FieldValue",
    "build_metadata",
    "RowHydrator",
    "Relation",
    "RelationManager",
    "Statement",
]
