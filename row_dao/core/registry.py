"""Schema registry - reserved table and relation names.

Every entity table and every relation join table lives in the same
namespace. A ``SchemaRegistry`` records which names are taken so that a
relation can never silently reuse an entity's table (or another relation).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator

from row_dao.core.exceptions import NameConflictError

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Thread-safe set of reserved table and relation names.

    Share one registry between all ``Dao`` objects of a session. Names are
    reserved when a ``Dao`` is built or a relation is registered, before the
    matching table exists in the database.
    """

    def __init__(self) -> None:
        self._names: set[str] = set()
        self._lock = threading.Lock()

    def reserve(self, name: str) -> None:
        """Reserve *name*.

        Raises:
            NameConflictError: If the name is already reserved.
        """
        with self._lock:
            if name in self._names:
                raise NameConflictError(name)
            self._names.add(name)
        logger.debug(f"Reserved schema name '{name}'")

    def release(self, name: str) -> None:
        """Release *name*; releasing an unknown name is a no-op."""
        with self._lock:
            self._names.discard(name)
        logger.debug(f"Released schema name '{name}'")

    def has(self, name: str) -> bool:
        """Check if a name is reserved."""
        with self._lock:
            return name in self._names

    @property
    def names(self) -> list[str]:
        """List all reserved names, sorted alphabetically."""
        with self._lock:
            return sorted(self._names)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        """Number of reserved names."""
        with self._lock:
            return len(self._names)


_default_registry = SchemaRegistry()


def default_registry() -> SchemaRegistry:
    """Return the process-wide registry used when no registry is passed."""
    return _default_registry
