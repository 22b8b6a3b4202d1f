"""
Example 02: Relations

This example demonstrates one-to-many and one-to-one relations stored in
join tables, and fields collected from a persisted base class.
"""

import tempfile
from dataclasses import dataclass

from row_dao import (
    ConnectionConfig,
    ConnectionManager,
    Dao,
    FieldType,
    column,
    persisted_base,
    table,
)


@persisted_base
@dataclass
class Named:
    id: int = column("id", FieldType.INT, primary_key=True)
    name: str = column("name", FieldType.VARCHAR)


@table("owner", fetch_ancestor_fields=True)
@dataclass
class Owner(Named):
    city: str = column("city", FieldType.VARCHAR)


@table("pet", fetch_ancestor_fields=True)
@dataclass
class Pet(Named):
    weight: float = column("weight", FieldType.DOUBLE)


def main():
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    manager = ConnectionManager(
        ConnectionConfig(driver="sqlite", database=db_path, pool_size=1)
    )
    owners = Dao(manager, Owner)
    pets = Dao(manager, Pet)

    # Relations are registered first; their join tables are created
    # together with the owner's table
    owners.has_many(pets, "owns")
    owners.has_one(pets, "favorite")
    pets.create_table()
    owners.create_table()

    alice = Owner(1, "Alice", "Lyon")
    rex = Pet(10, "Rex", 31.5)
    felix = Pet(11, "Felix", 4.2)
    owners.insert(alice)
    pets.insert(rex)
    pets.insert(felix)

    owners.link("owns", alice, rex)
    owners.link("owns", alice, felix)
    owners.link("favorite", alice, felix)

    print("Alice owns:")
    for pet in owners.find_one_to_many("owns", alice):
        print(f"  {pet.name} ({pet.weight} kg)")
    print(f"Favorite: {owners.find_one_to_one('favorite', alice)}")

    # A one-to-one relation holds a single link per owner
    print(f"Second favorite accepted: {owners.link('favorite', alice, rex)}")

    # Deleting a pet removes its links
    pets.delete(rex)
    print(f"After losing Rex: {[p.name for p in owners.find_one_to_many('owns', alice)]}")

    owners.close()
    pets.close()
    manager.close_pool()


if __name__ == "__main__":
    main()
