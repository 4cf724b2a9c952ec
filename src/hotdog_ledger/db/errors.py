"""Typed datastore exceptions for the DB package.

Repository modules raise these to signal infrastructure failures (SQLite
connection/query errors) instead of collapsing them into ``None`` or ``False``
return values.

Design intent:
    - Domain outcomes like "no entries yet" are still represented by empty
      results or zero totals.
    - Infrastructure failures raise :class:`StoreUnavailable` subclasses so the
      API boundary can map them to deterministic HTTP 5xx responses and logs.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class DatabaseOperationContext:
    """Structured operation metadata carried by repository exceptions.

    Attributes:
        operation: Stable operation identifier (for example
            ``"events.insert_event"``).
        details: Optional human-readable context for logs and debugging.
    """

    operation: str
    details: str | None = None


class StoreUnavailable(RuntimeError):
    """Base exception for datastore I/O failures."""


class DatabaseOperationError(StoreUnavailable):
    """Base exception for repository operation failures.

    Args:
        context: Structured operation metadata.
        cause: Optional underlying exception.
    """

    def __init__(
        self,
        *,
        context: DatabaseOperationContext,
        cause: Exception | None = None,
    ) -> None:
        message = context.operation
        if context.details:
            message = f"{message}: {context.details}"
        super().__init__(message)
        self.context = context
        self.cause = cause


class DatabaseReadError(DatabaseOperationError):
    """Repository read/query failure."""


class DatabaseWriteError(DatabaseOperationError):
    """Repository mutation/transaction failure."""
