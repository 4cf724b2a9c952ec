"""Protest workflow: contested deductions that need a second to apply."""

from hotdog_ledger.protest.coordinator import ProtestCoordinator, ProtestResolution
from hotdog_ledger.protest.store import (
    MemoryProtestStore,
    PendingProtestStore,
    SqliteProtestStore,
    build_protest_store,
)

__all__ = [
    "MemoryProtestStore",
    "PendingProtestStore",
    "ProtestCoordinator",
    "ProtestResolution",
    "SqliteProtestStore",
    "build_protest_store",
]
