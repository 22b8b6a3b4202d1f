"""
Example 01: Basic Dao Usage

This example demonstrates declaring a mapped class and storing, finding,
updating and deleting instances with a Dao.
"""

import tempfile
from dataclasses import dataclass

from row_dao import ConnectionConfig, Dao, FieldType, FieldValue, column, table


@table("person")
@dataclass
class Person:
    id: int = column("id", FieldType.INT, primary_key=True)
    age: int = column("age", FieldType.INT)
    name: str = column("name", FieldType.VARCHAR)


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    config = ConnectionConfig(driver="sqlite", database=db_path, pool_size=1)
    persons = Dao.from_config(config, Person)

    print(f"Created table: {persons.create_table()}")
    print(f"Created again: {persons.create_table()}")

    persons.insert(Person(0, 15, "Jean"))
    persons.insert(Person(1, 25, "Jacques"))
    persons.insert(Person(2, 15, "Paul"))
    print(f"Duplicate insert accepted: {persons.insert(Person(0, 99, 'Other'))}")

    print("\nAll persons:")
    for person in persons.find_all():
        print(f"  {person}")

    # Primary key lookup, as FieldValue or keyword
    print(f"\nBy primary key: {persons.find_by_pk(FieldValue('id', 1))}")
    print(f"Missing key: {persons.find_by_pk(id=42)}")

    # Every predicate must match
    print("\nAged 15:")
    for person in persons.find_all_where(age=15):
        print(f"  {person.name}")

    persons.update(Person(0, 16, "Jean"))
    print(f"\nAfter birthday: {persons.find_by_pk(id=0)}")

    persons.delete(Person(2, 15, "Paul"))
    print(f"Remaining: {len(persons.find_all())}")

    persons.purge()
    print(f"After purge: {persons.find_all()}")

    persons.drop_table()
    persons.close()


if __name__ == "__main__":
    main()
