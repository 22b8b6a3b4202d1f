"""The Dao facade.

One Dao per mapped class: it owns the class's metadata, builds statements,
runs them through the executor and hydrates the rows it gets back.

Failure policy:
    * Mutations (insert, update, delete, purge, drop, link) report a failed
      statement as ``False`` and log the cause.
    * Reads raise StatementExecutionError, so "no rows" and "query failed"
      stay distinguishable, and HydrationError if any row cannot be mapped.
    * Creating the relation join tables raises, so schema setup can be
      retried as a whole.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from row_dao.core.connection import ConnectionConfig, ConnectionManager
from row_dao.core.engine import Executor
from row_dao.core.enums import Cardinality
from row_dao.core.exceptions import StatementExecutionError
from row_dao.core.registry import SchemaRegistry, default_registry
from row_dao.mapping import statements
from row_dao.mapping.hydrator import RowHydrator
from row_dao.mapping.metadata import EntityMetadata, FieldValue, build_metadata
from row_dao.mapping.relations import Relation, RelationManager
from row_dao.mapping.statements import Statement

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


def _predicates(positional: tuple[FieldValue, ...], named: dict[str, Any]) -> list[FieldValue]:
    return list(positional) + [FieldValue(column, value) for column, value in named.items()]


class Dao(Generic[T]):
    """Generic data access object for one class declared with ``@table``.

    Args:
        connection_manager: Source of database connections.
        entity_class: The mapped class.
        schema: Registry of reserved table and relation names. Defaults to
            the process-wide registry.

    Raises:
        ConfigurationError: If the class cannot be mapped.
        NameConflictError: If the table name is already reserved.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        entity_class: type[T],
        *,
        schema: SchemaRegistry | None = None,
    ) -> None:
        self._metadata = build_metadata(entity_class)
        self._schema = schema if schema is not None else default_registry()
        self._schema.reserve(self._metadata.table_name)

        self._executor = Executor(connection_manager)
        self._hydrator = RowHydrator(self._metadata)
        self._relations = RelationManager(self._metadata, self._executor, self._schema)

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        entity_class: type[U],
        *,
        schema: SchemaRegistry | None = None,
    ) -> Dao[U]:
        """Create a Dao with its own ConnectionManager built from *config*."""
        return cls(ConnectionManager(config), entity_class, schema=schema)  # type: ignore[arg-type]

    @property
    def metadata(self) -> EntityMetadata[T]:
        return self._metadata

    @property
    def table_name(self) -> str:
        return self._metadata.table_name

    @property
    def relations(self) -> list[Relation]:
        return self._relations.relations

    def __repr__(self) -> str:
        return f"Dao({self._metadata.entity_class.__name__}, table='{self.table_name}')"

    # --- Relations ---

    def has_one(self, other: Dao[Any], relation_name: str) -> Relation:
        """Register a one-to-one relation to *other*, stored in table *relation_name*."""
        return self._relations.register(other, relation_name, Cardinality.ONE_TO_ONE)

    def has_many(self, other: Dao[Any], relation_name: str) -> Relation:
        """Register a one-to-many relation to *other*, stored in table *relation_name*."""
        return self._relations.register(other, relation_name, Cardinality.ONE_TO_MANY)

    # --- Schema ---

    def create_table(self, force: bool = False) -> bool:
        """Create the table, then the join tables of pending relations.

        With *force*, the table is dropped first; a failed drop is ignored.

        Returns:
            True if the table was created, False if it already existed or
            could not be created.

        Raises:
            StatementExecutionError: If a relation join table cannot be created.
        """
        if force:
            try:
                self._executor.execute(statements.drop_table(self._metadata))
                logger.info(f"Dropped table '{self.table_name}'")
            except StatementExecutionError as e:
                logger.warning(f"Ignoring failed drop of '{self.table_name}': {e}")

        created = False
        if self._table_exists():
            logger.debug(f"Table '{self.table_name}' already exists")
        else:
            statement = statements.create_table(self._metadata, self._executor.type_names)
            if not self._run(statement, "create table"):
                return False
            created = True
            logger.info(f"Created table '{self.table_name}'")

        self._relations.materialize()
        return created

    def drop_table(self) -> bool:
        """Drop the table. Returns False if it could not be dropped."""
        if not self._run(statements.drop_table(self._metadata), "drop table"):
            return False
        logger.info(f"Dropped table '{self.table_name}'")
        return True

    # --- Rows ---

    def insert(self, obj: T) -> bool:
        """Insert *obj*. Returns False if the database rejects it."""
        return self._run(statements.insert(self._metadata, obj), "insert")

    def find_all(self) -> list[T]:
        """Every row of the table, as instances."""
        rows = self._executor.fetch_all(statements.select_all(self._metadata))
        return self._hydrator.map_many(rows)

    def find_by_pk(self, *primary_keys: FieldValue, **columns: Any) -> T | None:
        """The instance with the given primary key, or None.

        Key columns can be passed as FieldValue objects, as keywords, or both.

        Raises:
            NoPrimaryKeyError: If the entity declares no primary key.
            PrimaryKeyMismatchError: If the given columns are not exactly the
                primary key.
        """
        statement = statements.select_by_primary_key(
            self._metadata, _predicates(primary_keys, columns)
        )
        rows = self._executor.fetch_all(statement)
        if not rows:
            return None
        return self._hydrator.map_one(rows[0])

    def find_all_where(self, *fields: FieldValue, **columns: Any) -> list[T]:
        """Instances whose columns equal every given value (all rows if none given).

        Raises:
            TooManyPredicatesError: If more values are given than there are fields.
            UnknownFieldError: If a column is not mapped.
        """
        statement = statements.select_where(self._metadata, _predicates(fields, columns))
        rows = self._executor.fetch_all(statement)
        return self._hydrator.map_many(rows)

    def update(self, obj: T) -> bool:
        """Write every non-key field of *obj* to the row sharing its primary key.

        The primary key of *obj* must be the one already stored.

        Raises:
            NoPrimaryKeyError: If the entity declares no primary key.
        """
        statement = statements.update(self._metadata, obj)
        if statement is None:
            logger.warning(f"Nothing to update on '{self.table_name}': every field is a key")
            return False
        return self._run(statement, "update")

    def delete(self, obj: T) -> bool:
        """Delete the row sharing *obj*'s primary key.

        Raises:
            NoPrimaryKeyError: If the entity declares no primary key.
        """
        return self._run(statements.delete(self._metadata, obj), "delete")

    def purge(self) -> bool:
        """Delete every row, keeping the table."""
        return self._run(statements.purge(self._metadata), "purge")

    # --- Relation rows ---

    def link(self, relation: str | Dao[Any], obj: T, other_obj: Any) -> bool:
        """Pair *obj* with *other_obj* in a relation given by name or other Dao.

        Raises:
            NoRelationError: If no such relation is registered on this Dao.
        """
        found = self._relations.get(relation)
        try:
            self._relations.insert_link(found, obj, other_obj)
        except StatementExecutionError as e:
            logger.warning(f"link through '{found.name}' failed: {e}")
            return False
        return True

    def unlink(self, relation: str | Dao[Any], obj: T, other_obj: Any) -> bool:
        """Remove the pairing of *obj* with *other_obj*.

        Raises:
            NoRelationError: If no such relation is registered on this Dao.
        """
        found = self._relations.get(relation)
        try:
            self._relations.delete_link(found, obj, other_obj)
        except StatementExecutionError as e:
            logger.warning(f"unlink through '{found.name}' failed: {e}")
            return False
        return True

    def find_one_to_many(self, relation: str | Dao[U], obj: T) -> list[U]:
        """Every instance linked to *obj* through a one-to-many relation.

        Raises:
            NoRelationError: If no such one-to-many relation is registered.
        """
        found = self._relations.get(relation, Cardinality.ONE_TO_MANY)
        return self._relations.query_linked(found, obj)

    def find_one_to_one(self, relation: str | Dao[U], obj: T) -> U | None:
        """The instance linked to *obj* through a one-to-one relation, or None.

        Raises:
            NoRelationError: If no such one-to-one relation is registered.
        """
        found = self._relations.get(relation, Cardinality.ONE_TO_ONE)
        linked = self._relations.query_linked(found, obj)
        return linked[0] if linked else None

    # --- Lifecycle ---

    def close(self) -> None:
        """Release the table and relation names reserved by this Dao."""
        self._relations.release()
        self._schema.release(self.table_name)

    # --- Internals ---

    def _run(self, statement: Statement, action: str) -> bool:
        try:
            self._executor.execute(statement)
        except StatementExecutionError as e:
            logger.warning(f"{action} on '{self.table_name}' failed: {e}")
            return False
        return True

    def _table_exists(self) -> bool:
        try:
            self._executor.fetch_all(statements.table_probe(self.table_name))
        except StatementExecutionError:
            return False
        return True
