"""Declarative table markers.

A mapped class is declared once, at class definition time::

    @table("person")
    @dataclass
    class Person:
        id: int = column("id", FieldType.INT, primary_key=True)
        age: int = column("age", FieldType.INT)
        name: str = column("name", FieldType.VARCHAR)

``column`` gives every field a default (the type's zero value unless one is
supplied) so the class always has a no-argument construction path. Classes
that are not dataclasses pass an explicit ``fields=[Column(...)]`` list.

Ancestors contribute fields only when the table asks for them with
``fetch_ancestor_fields=True`` and the ancestor is marked ``persisted_base``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar, overload

from row_dao.core.enums import FieldType

C = TypeVar("C", bound=type)

_COLUMN_KEY = "row_dao.column"
_TABLE_ATTR = "__row_dao_table__"
_BASE_ATTR = "__row_dao_base__"


@dataclass(frozen=True)
class Column:
    """One persisted attribute: where it lives on the object and in the table."""

    attribute: str
    name: str
    field_type: FieldType
    primary_key: bool = False


@dataclass(frozen=True)
class TableDeclaration:
    """What ``@table`` recorded about a class."""

    table_name: str
    columns: tuple[Column, ...]
    fetch_ancestor_fields: bool = False
    factory: Callable[[], Any] | None = None


def column(
    name: str,
    field_type: FieldType,
    *,
    primary_key: bool = False,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
) -> Any:
    """Declare a persisted dataclass field stored in column *name*."""
    if default is dataclasses.MISSING and default_factory is dataclasses.MISSING:
        default = field_type.zero
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={_COLUMN_KEY: (name, field_type, primary_key)},
    )


def _dataclass_columns(cls: type) -> tuple[Column, ...]:
    """Columns declared with ``column`` directly on *cls* (inherited ones excluded)."""
    if not dataclasses.is_dataclass(cls):
        return ()

    # Inherited fields are the very Field objects of the base dataclass
    inherited: set[int] = set()
    for base in cls.__mro__[1:]:
        for f in getattr(base, "__dataclass_fields__", {}).values():
            inherited.add(id(f))

    columns: list[Column] = []
    for f in dataclasses.fields(cls):
        if id(f) in inherited or _COLUMN_KEY not in f.metadata:
            continue
        name, field_type, primary_key = f.metadata[_COLUMN_KEY]
        columns.append(Column(f.name, name, field_type, primary_key))
    return tuple(columns)


def _declared_columns(cls: type, fields: Iterable[Column] | None) -> tuple[Column, ...]:
    if fields is not None:
        return tuple(fields)
    return _dataclass_columns(cls)


def table(
    name: str,
    *,
    fetch_ancestor_fields: bool = False,
    fields: Iterable[Column] | None = None,
    factory: Callable[[], Any] | None = None,
) -> Callable[[C], C]:
    """Mark a class as mapped to table *name*.

    Args:
        name: Unique table name.
        fetch_ancestor_fields: Also map fields of ancestors marked with
            ``persisted_base``, walking up until an unmarked ancestor.
        fields: Explicit columns, for classes that are not dataclasses.
        factory: No-argument callable creating blank instances. Defaults
            to the class itself.
    """

    def decorate(cls: C) -> C:
        declaration = TableDeclaration(
            table_name=name,
            columns=_declared_columns(cls, fields),
            fetch_ancestor_fields=fetch_ancestor_fields,
            factory=factory,
        )
        setattr(cls, _TABLE_ATTR, declaration)
        return cls

    return decorate


@overload
def persisted_base(cls: C) -> C: ...


@overload
def persisted_base(*, fields: Iterable[Column] | None = None) -> Callable[[C], C]: ...


def persisted_base(cls: Any = None, *, fields: Iterable[Column] | None = None) -> Any:
    """Mark an ancestor whose fields subclasses may collect.

    The marker also lets collection continue to this class's own parent.
    Usable bare (``@persisted_base``) or with explicit ``fields``.
    """

    def decorate(target: C) -> C:
        setattr(target, _BASE_ATTR, _declared_columns(target, fields))
        return target

    if cls is not None:
        return decorate(cls)
    return decorate


def table_declaration(cls: type) -> TableDeclaration | None:
    """The declaration made by ``@table`` on *cls* itself, not on an ancestor."""
    declaration = cls.__dict__.get(_TABLE_ATTR)
    return declaration if isinstance(declaration, TableDeclaration) else None


def ancestor_columns(cls: type) -> list[tuple[Column, ...]]:
    """Walk up from *cls* collecting ``persisted_base`` ancestors, nearest first."""
    chain: list[tuple[Column, ...]] = []
    for base in cls.__mro__[1:]:
        if _BASE_ATTR not in base.__dict__:
            break
        chain.append(base.__dict__[_BASE_ATTR])
    return chain
