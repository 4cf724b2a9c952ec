"""Pending-protest storage owned by the protest coordinator.

Two interchangeable implementations satisfy :class:`PendingProtestStore`:

- :class:`SqliteProtestStore` persists protests in the ``protests`` table so a
  restart does not silently drop proposals awaiting a second.
- :class:`MemoryProtestStore` keeps them in a process-local dict. Pending
  protests are lost on restart; use it where the database must stay
  ledger-only.

Every method accepts an optional ``conn``. The SQLite store joins that
transaction; the memory store ignores it, so a resolve whose transaction
later fails to commit must be undone with ``reopen``.
"""

from __future__ import annotations

import sqlite3
import threading
from typing import Protocol

from hotdog_ledger.db import protests_repo
from hotdog_ledger.db.types import PendingProtest
from hotdog_ledger.errors import ProtestExists


class PendingProtestStore(Protocol):
    """Storage contract for the PROPOSED -> RESOLVED protest lifecycle."""

    def add(self, protest: PendingProtest, *, conn: sqlite3.Connection | None = None) -> None:
        """Store a new protest in the PROPOSED state.

        Raises:
            ProtestExists: the key is already stored.
        """
        ...

    def get(
        self, protest_id: str, *, conn: sqlite3.Connection | None = None
    ) -> PendingProtest | None:
        """Return the protest if it is still PROPOSED."""
        ...

    def resolve(
        self, protest_id: str, resolved_by: str, *, conn: sqlite3.Connection | None = None
    ) -> bool:
        """Atomically move a PROPOSED protest to RESOLVED.

        Returns False when another caller already resolved it.
        """
        ...

    def reopen(self, protest: PendingProtest) -> None:
        """Return a protest to PROPOSED after its resolving transaction failed."""
        ...

    def pending_count(self) -> int:
        """Number of protests awaiting a second."""
        ...


class SqliteProtestStore:
    """Durable protest store backed by the ``protests`` table."""

    def add(self, protest: PendingProtest, *, conn: sqlite3.Connection | None = None) -> None:
        protests_repo.insert_protest(protest, conn=conn)

    def get(
        self, protest_id: str, *, conn: sqlite3.Connection | None = None
    ) -> PendingProtest | None:
        return protests_repo.get_pending_protest(protest_id, conn=conn)

    def resolve(
        self, protest_id: str, resolved_by: str, *, conn: sqlite3.Connection | None = None
    ) -> bool:
        return protests_repo.mark_resolved(protest_id, resolved_by, conn=conn)

    def reopen(self, protest: PendingProtest) -> None:
        # The resolve was part of the rolled-back transaction.
        return None

    def pending_count(self) -> int:
        return protests_repo.count_pending()


class MemoryProtestStore:
    """Process-local protest store. Only the keys of resolved protests are kept."""

    def __init__(self) -> None:
        self._pending: dict[str, PendingProtest] = {}
        self._resolved: set[str] = set()
        self._lock = threading.Lock()

    def add(self, protest: PendingProtest, *, conn: sqlite3.Connection | None = None) -> None:
        with self._lock:
            if protest.protest_id in self._pending or protest.protest_id in self._resolved:
                raise ProtestExists(protest.protest_id)
            self._pending[protest.protest_id] = protest

    def get(
        self, protest_id: str, *, conn: sqlite3.Connection | None = None
    ) -> PendingProtest | None:
        with self._lock:
            return self._pending.get(protest_id)

    def resolve(
        self, protest_id: str, resolved_by: str, *, conn: sqlite3.Connection | None = None
    ) -> bool:
        with self._lock:
            if self._pending.pop(protest_id, None) is None:
                return False
            self._resolved.add(protest_id)
            return True

    def reopen(self, protest: PendingProtest) -> None:
        with self._lock:
            self._resolved.discard(protest.protest_id)
            self._pending.setdefault(protest.protest_id, protest)

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)


def build_protest_store(storage: str) -> PendingProtestStore:
    """Create the store named by ``protests.storage`` configuration."""
    if storage == "memory":
        return MemoryProtestStore()
    if storage == "sqlite":
        return SqliteProtestStore()
    raise ValueError(f"Unknown protest storage {storage!r}; expected 'sqlite' or 'memory'.")
