"""Entity metadata registry.

Turns a class declared with ``@table`` into an immutable EntityMetadata:
table name, ordered field descriptors with accessor/mutator callables,
primary keys, and the no-argument factory used for hydration.
"""

from __future__ import annotations

import inspect
import logging
import operator
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from row_dao.core.enums import FieldType
from row_dao.core.exceptions import ConfigurationError
from row_dao.core.sanitizer import check_identifier
from row_dao.mapping.declarations import (
    Column,
    ancestor_columns,
    table_declaration,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FieldValue:
    """A column name paired with a value: a predicate or a bound parameter."""

    column: str
    value: Any


@dataclass(frozen=True)
class FieldDescriptor:
    """Metadata for one persisted attribute."""

    column: str
    field_type: FieldType
    primary_key: bool
    attribute: str
    getter: Callable[[Any], Any] = field(repr=False, compare=False)
    setter: Callable[[Any, Any], None] = field(repr=False, compare=False)


@dataclass(frozen=True)
class EntityMetadata(Generic[T]):
    """Immutable mapping description of one entity class."""

    entity_class: type[T]
    table_name: str
    fields: tuple[FieldDescriptor, ...]
    primary_keys: tuple[FieldDescriptor, ...]
    factory: Callable[[], T] = field(repr=False, compare=False)

    @property
    def columns(self) -> list[str]:
        return [f.column for f in self.fields]

    @property
    def primary_key_columns(self) -> list[str]:
        return [f.column for f in self.primary_keys]

    def get_field(self, column: str) -> FieldDescriptor | None:
        """Look up a field by column name."""
        for descriptor in self.fields:
            if descriptor.column == column:
                return descriptor
        return None

    def values(
        self, instance: T, fields: Iterable[FieldDescriptor] | None = None
    ) -> list[Any]:
        """Read *fields* (default: all) from *instance*, in order."""
        return [f.getter(instance) for f in (self.fields if fields is None else fields)]

    def primary_key_values(self, instance: T) -> list[FieldValue]:
        """The primary key of *instance* as predicates, in registry order."""
        return [FieldValue(f.column, f.getter(instance)) for f in self.primary_keys]


def _make_setter(attribute: str) -> Callable[[Any, Any], None]:
    # object.__setattr__ also reaches frozen dataclasses
    def setter(instance: Any, value: Any) -> None:
        object.__setattr__(instance, attribute, value)

    return setter


def _describe(col: Column) -> FieldDescriptor:
    return FieldDescriptor(
        column=col.name,
        field_type=col.field_type,
        primary_key=col.primary_key,
        attribute=col.attribute,
        getter=operator.attrgetter(col.attribute),
        setter=_make_setter(col.attribute),
    )


def _check_instantiable(cls: type, factory: Callable[[], Any]) -> None:
    """Raise ConfigurationError unless *factory* can be called with no arguments."""
    name = cls.__name__
    if getattr(cls, "_is_protocol", False):
        raise ConfigurationError(name, "protocols cannot be instantiated")
    if inspect.isabstract(cls):
        raise ConfigurationError(name, "abstract classes cannot be instantiated")
    if not callable(factory):
        raise ConfigurationError(name, "factory is not callable")
    try:
        inspect.signature(factory).bind()
    except TypeError as e:
        raise ConfigurationError(name, f"no no-argument construction path ({e})") from e
    except ValueError:
        # Builtins without an introspectable signature; trust the factory
        pass


def build_metadata(entity_class: type[T]) -> EntityMetadata[T]:
    """Build the metadata of a class declared with ``@table``.

    Raises:
        ConfigurationError: If the class has no table declaration, cannot be
            instantiated without arguments, declares no fields, declares a
            column twice, or uses a name that is not a plain SQL identifier.
    """
    name = entity_class.__name__
    declaration = table_declaration(entity_class)
    if declaration is None:
        raise ConfigurationError(name, "class is not declared with @table")

    factory = declaration.factory or entity_class
    _check_instantiable(entity_class, factory)

    columns: list[Column] = []
    if declaration.fetch_ancestor_fields:
        for base_columns in reversed(ancestor_columns(entity_class)):
            columns.extend(base_columns)
    columns.extend(declaration.columns)

    if not columns:
        raise ConfigurationError(name, "no persisted fields declared")

    try:
        check_identifier(declaration.table_name, "table")
        for col in columns:
            check_identifier(col.name, "column")
    except ValueError as e:
        raise ConfigurationError(name, str(e)) from e

    seen: set[str] = set()
    for col in columns:
        if col.name in seen:
            raise ConfigurationError(name, f"column '{col.name}' is declared more than once")
        seen.add(col.name)

    fields = tuple(_describe(col) for col in columns)
    metadata = EntityMetadata(
        entity_class=entity_class,
        table_name=declaration.table_name,
        fields=fields,
        primary_keys=tuple(f for f in fields if f.primary_key),
        factory=factory,
    )
    logger.debug(
        f"Mapped {name} to '{metadata.table_name}' "
        f"({len(fields)} fields, {len(metadata.primary_keys)} primary keys)"
    )
    return metadata
