"""Relations between entities, stored in join tables.

A relation is registered on its owner (``Registered``) and its join table is
created later, together with the owner's table (``Materialized``). Linked
lookups read the owner's join rows and then fetch each linked entity through
the other side's facade, one query per join row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from row_dao.core.engine import Executor
from row_dao.core.enums import Cardinality, RelationState
from row_dao.core.exceptions import (
    ConfigurationError,
    HydrationError,
    NoPrimaryKeyError,
    NoRelationError,
)
from row_dao.core.registry import SchemaRegistry
from row_dao.core.sanitizer import check_identifier
from row_dao.mapping import statements
from row_dao.mapping.hydrator import column_value
from row_dao.mapping.metadata import EntityMetadata, FieldValue

if TYPE_CHECKING:
    from row_dao.repository.dao import Dao

logger = logging.getLogger(__name__)


@dataclass
class Relation:
    """A named association from an owner entity to another entity."""

    name: str
    cardinality: Cardinality
    owner: EntityMetadata[Any]
    other: Dao[Any]
    state: RelationState = RelationState.REGISTERED

    @property
    def other_metadata(self) -> EntityMetadata[Any]:
        return self.other.metadata


class RelationManager:
    """Relations owned by one entity.

    Args:
        owner: Metadata of the owning entity.
        executor: Executor used for join table statements.
        schema: Registry in which relation names are reserved.
    """

    def __init__(
        self,
        owner: EntityMetadata[Any],
        executor: Executor,
        schema: SchemaRegistry,
    ) -> None:
        self._owner = owner
        self._executor = executor
        self._schema = schema
        self._relations: dict[str, Relation] = {}

    @property
    def relations(self) -> list[Relation]:
        """Registered relations, in registration order."""
        return list(self._relations.values())

    @property
    def pending(self) -> list[Relation]:
        """Relations whose join table has not been created yet."""
        return [r for r in self._relations.values() if r.state is RelationState.REGISTERED]

    def register(self, other: Dao[Any], name: str, cardinality: Cardinality) -> Relation:
        """Register a relation named *name* to *other*.

        The name is reserved immediately; the join table is created by
        ``materialize``.

        Raises:
            NoPrimaryKeyError: If either entity declares no primary key.
            ConfigurationError: If the name or a join column is not a valid
                identifier, or the join columns of both sides collide.
            NameConflictError: If the name is already used by a table or relation.
        """
        other_metadata = other.metadata
        if not self._owner.primary_keys:
            raise NoPrimaryKeyError(self._owner.table_name)
        if not other_metadata.primary_keys:
            raise NoPrimaryKeyError(other_metadata.table_name)

        owner_columns = [col for col, _ in statements.join_columns(self._owner)]
        other_columns = [col for col, _ in statements.join_columns(other_metadata)]
        owner_class = self._owner.entity_class.__name__
        try:
            check_identifier(name, "relation")
            for col in owner_columns + other_columns:
                check_identifier(col, "join column")
        except ValueError as e:
            raise ConfigurationError(owner_class, str(e)) from e
        if set(owner_columns) & set(other_columns):
            raise ConfigurationError(
                owner_class,
                f"relation '{name}' would give both sides the same join columns",
            )

        self._schema.reserve(name)
        relation = Relation(
            name=name,
            cardinality=cardinality,
            owner=self._owner,
            other=other,
        )
        self._relations[name] = relation
        logger.debug(
            f"Registered {cardinality.value} relation '{name}' "
            f"from '{self._owner.table_name}' to '{other_metadata.table_name}'"
        )
        return relation

    def get(self, key: str | Dao[Any], cardinality: Cardinality | None = None) -> Relation:
        """Find a relation by name, or by the facade on its other side.

        Raises:
            NoRelationError: If no matching relation is registered, or a
                facade key matches several relations.
        """
        matches = [
            relation
            for relation in self._relations.values()
            if (cardinality is None or relation.cardinality is cardinality)
            and (relation.name == key if isinstance(key, str) else relation.other is key)
        ]
        if len(matches) == 1:
            return matches[0]

        if isinstance(key, str):
            label = f"named '{key}'"
        else:
            label = f"with '{key.metadata.table_name}'"
        if cardinality is not None:
            label = f"{cardinality.value} {label}"
        if matches:
            names = ", ".join(r.name for r in matches)
            label = f"{label} that is unambiguous ({names} match; pass the relation name)"
        raise NoRelationError(self._owner.table_name, label)

    def materialize(self) -> list[Relation]:
        """Create the join table of every pending relation.

        Returns the relations materialized by this call.

        Raises:
            StatementExecutionError: If a join table cannot be created; that
                relation and those after it stay pending.
        """
        done: list[Relation] = []
        for relation in self.pending:
            statement = statements.create_relation_table(
                relation.name,
                relation.cardinality,
                self._owner,
                relation.other_metadata,
                self._executor.type_names,
            )
            self._executor.execute(statement)
            relation.state = RelationState.MATERIALIZED
            done.append(relation)
            logger.info(f"Created join table '{relation.name}'")
        return done

    def insert_link(self, relation: Relation, owner_instance: Any, other_instance: Any) -> int:
        """Store one owner/other pairing. Returns affected row count."""
        statement = statements.insert_link(
            relation.name,
            self._owner,
            relation.other_metadata,
            owner_instance,
            other_instance,
        )
        return self._executor.execute(statement)

    def delete_link(self, relation: Relation, owner_instance: Any, other_instance: Any) -> int:
        """Remove one owner/other pairing. Returns affected row count."""
        statement = statements.delete_link(
            relation.name,
            self._owner,
            relation.other_metadata,
            owner_instance,
            other_instance,
        )
        return self._executor.execute(statement)

    def query_linked(self, relation: Relation, owner_instance: Any) -> list[Any]:
        """Every entity linked to *owner_instance* through *relation*."""
        rows = self._executor.fetch_all(
            statements.select_links(relation.name, self._owner, owner_instance)
        )
        other_metadata = relation.other_metadata
        other_columns = statements.join_columns(other_metadata)

        linked: list[Any] = []
        for row in rows:
            try:
                predicates = [
                    FieldValue(pk.column, column_value(row, col)) for col, pk in other_columns
                ]
            except KeyError as e:
                raise HydrationError(
                    other_metadata.entity_class.__name__,
                    f"join row of '{relation.name}' has no column {e}",
                ) from None
            linked.extend(relation.other.find_all_where(*predicates))
        return linked

    def release(self) -> None:
        """Release every relation name held by this manager."""
        for name in self._relations:
            self._schema.release(name)
        self._relations.clear()
