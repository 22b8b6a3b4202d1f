"""Repository layer - the per-entity Dao facade."""

from __future__ import annotations

from row_dao.repository.dao import Dao

__all__ = [
    "Dao",
]
