"""Unit tests for table declarations and metadata building."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol

import pytest

from row_dao.core.enums import FieldType
from row_dao.core.exceptions import ConfigurationError
from row_dao.mapping.declarations import Column, column, persisted_base, table
from row_dao.mapping.metadata import FieldValue, build_metadata


@table("person")
@dataclass
class Person:
    id: int = column("id", FieldType.INT, primary_key=True)
    age: int = column("age", FieldType.INT)
    name: str = column("name", FieldType.VARCHAR)


@table("seat")
@dataclass
class Seat:
    row: str = column("seat_row", FieldType.CHAR, primary_key=True)
    number: int = column("seat_number", FieldType.INT, primary_key=True)
    booked: bool = column("booked", FieldType.BOOLEAN)
    note: str = "not persisted"


@table("frozen_point")
@dataclass(frozen=True)
class FrozenPoint:
    x: int = column("x", FieldType.INT, primary_key=True)
    y: int = column("y", FieldType.INT)


@persisted_base
@dataclass
class Named:
    name: str = column("name", FieldType.VARCHAR)


@persisted_base
@dataclass
class Identified(Named):
    id: int = column("id", FieldType.INT, primary_key=True)


@table("employee", fetch_ancestor_fields=True)
@dataclass
class Employee(Identified):
    salary: float = column("salary", FieldType.DOUBLE)


@table("manager")
@dataclass
class Manager(Identified):
    level: int = column("level", FieldType.INT)


@dataclass
class Unmarked(Named):
    code: str = column("code", FieldType.VARCHAR)


@table("badge", fetch_ancestor_fields=True)
@dataclass
class Badge(Unmarked):
    id: int = column("id", FieldType.INT, primary_key=True)


@table("account", fields=[Column("number", "number", FieldType.INT, primary_key=True)])
class Account:
    def __init__(self) -> None:
        self.number = 0


class TestDeclarations:
    def test_column_defaults_to_type_zero(self) -> None:
        seat = Seat()
        assert seat.row == ""
        assert seat.number == 0
        assert seat.booked is False

    def test_column_keeps_explicit_default(self) -> None:
        @table("counter")
        @dataclass
        class Counter:
            value: int = column("value", FieldType.INT, default=10)

        assert Counter().value == 10

    def test_table_declaration_is_not_inherited(self) -> None:
        @dataclass
        class Child(Person):
            pass

        with pytest.raises(ConfigurationError, match="not declared with @table"):
            build_metadata(Child)


class TestBuildMetadata:
    def test_table_and_fields(self) -> None:
        metadata = build_metadata(Person)
        assert metadata.table_name == "person"
        assert metadata.columns == ["id", "age", "name"]
        assert metadata.primary_key_columns == ["id"]
        assert metadata.entity_class is Person

    def test_field_types(self) -> None:
        metadata = build_metadata(Seat)
        types = {f.column: f.field_type for f in metadata.fields}
        assert types == {
            "seat_row": FieldType.CHAR,
            "seat_number": FieldType.INT,
            "booked": FieldType.BOOLEAN,
        }

    def test_composite_primary_key_in_declaration_order(self) -> None:
        metadata = build_metadata(Seat)
        assert metadata.primary_key_columns == ["seat_row", "seat_number"]

    def test_plain_attribute_is_not_mapped(self) -> None:
        assert build_metadata(Seat).get_field("note") is None

    def test_getters_read_values(self) -> None:
        metadata = build_metadata(Person)
        assert metadata.values(Person(1, 15, "Jean")) == [1, 15, "Jean"]

    def test_primary_key_values(self) -> None:
        metadata = build_metadata(Seat)
        assert metadata.primary_key_values(Seat("B", 12, True)) == [
            FieldValue("seat_row", "B"),
            FieldValue("seat_number", 12),
        ]

    def test_setters_reach_frozen_dataclasses(self) -> None:
        metadata = build_metadata(FrozenPoint)
        point = metadata.factory()
        metadata.get_field("y").setter(point, 7)  # type: ignore[union-attr]
        assert point.y == 7

    def test_explicit_columns_on_plain_class(self) -> None:
        metadata = build_metadata(Account)
        assert metadata.columns == ["number"]
        account = Account()
        account.number = 42
        assert metadata.values(account) == [42]


class TestAncestorFields:
    def test_collects_marked_ancestors_farthest_first(self) -> None:
        metadata = build_metadata(Employee)
        assert metadata.columns == ["name", "id", "salary"]
        assert metadata.primary_key_columns == ["id"]

    def test_ancestors_ignored_without_flag(self) -> None:
        metadata = build_metadata(Manager)
        assert metadata.columns == ["level"]
        assert metadata.primary_keys == ()

    def test_walk_stops_at_unmarked_ancestor(self) -> None:
        metadata = build_metadata(Badge)
        assert metadata.columns == ["id"]


class TestInvalidClasses:
    def test_missing_table_declaration(self) -> None:
        @dataclass
        class Loose:
            id: int = column("id", FieldType.INT)

        with pytest.raises(ConfigurationError, match="Loose"):
            build_metadata(Loose)

    def test_abstract_class(self) -> None:
        @table("shape")
        @dataclass
        class Shape(ABC):
            id: int = column("id", FieldType.INT, primary_key=True)

            @abstractmethod
            def area(self) -> float: ...

        with pytest.raises(ConfigurationError, match="abstract"):
            build_metadata(Shape)

    def test_protocol_class(self) -> None:
        @table("readable", fields=[Column("id", "id", FieldType.INT)])
        class Readable(Protocol):
            id: int

        with pytest.raises(ConfigurationError, match="protocol"):
            build_metadata(Readable)

    def test_no_argument_constructor_required(self) -> None:
        @table("vector", fields=[Column("x", "x", FieldType.INT)])
        class Vector:
            def __init__(self, x: int) -> None:
                self.x = x

        with pytest.raises(ConfigurationError, match="no-argument"):
            build_metadata(Vector)

    def test_factory_provides_construction_path(self) -> None:
        class Vector:
            def __init__(self, x: int) -> None:
                self.x = x

        table("vector", fields=[Column("x", "x", FieldType.INT)], factory=lambda: Vector(0))(
            Vector
        )
        assert build_metadata(Vector).factory().x == 0

    def test_duplicate_column_names(self) -> None:
        @table("twice")
        @dataclass
        class Twice:
            a: int = column("value", FieldType.INT)
            b: int = column("value", FieldType.INT)

        with pytest.raises(ConfigurationError, match="more than once"):
            build_metadata(Twice)

    def test_no_fields(self) -> None:
        @table("empty")
        @dataclass
        class Empty:
            label: str = ""

        with pytest.raises(ConfigurationError, match="no persisted fields"):
            build_metadata(Empty)

    def test_table_name_must_be_identifier(self) -> None:
        @table("people; DROP TABLE x")
        @dataclass
        class Bad:
            id: int = column("id", FieldType.INT)

        with pytest.raises(ConfigurationError, match="table name"):
            build_metadata(Bad)

    def test_column_name_must_be_identifier(self) -> None:
        @table("fine")
        @dataclass
        class Bad:
            id: int = column("1st", FieldType.INT)

        with pytest.raises(ConfigurationError, match="column name"):
            build_metadata(Bad)
