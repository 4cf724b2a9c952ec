"""Protest repository operations for the SQLite backend.

Rows move from ``status='proposed'`` to ``status='resolved'`` exactly once.
The transition is a conditional ``UPDATE ... WHERE status = 'proposed'`` so a
second resolver observes zero affected rows instead of double-applying.
"""

from __future__ import annotations

import sqlite3
from typing import NoReturn

from hotdog_ledger.db.connection import reuse_or_open
from hotdog_ledger.db.errors import (
    DatabaseOperationContext,
    DatabaseReadError,
    DatabaseWriteError,
    StoreUnavailable,
)
from hotdog_ledger.db.types import PendingProtest
from hotdog_ledger.errors import ProtestExists


def _raise_read_error(operation: str, exc: Exception, *, details: str | None = None) -> NoReturn:
    """Raise a typed repository read error while preserving chained cause."""
    if isinstance(exc, StoreUnavailable):
        raise exc
    raise DatabaseReadError(
        context=DatabaseOperationContext(operation=operation, details=details),
        cause=exc,
    ) from exc


def _raise_write_error(operation: str, exc: Exception, *, details: str | None = None) -> NoReturn:
    """Raise a typed repository write error while preserving chained cause."""
    if isinstance(exc, StoreUnavailable):
        raise exc
    raise DatabaseWriteError(
        context=DatabaseOperationContext(operation=operation, details=details),
        cause=exc,
    ) from exc


def insert_protest(protest: PendingProtest, *, conn: sqlite3.Connection | None = None) -> None:
    """Persist a new protest in the ``proposed`` state.

    Raises:
        ProtestExists: a protest with the same key was already stored.
    """
    try:
        with reuse_or_open(conn, write=True) as active:
            active.execute(
                """
                INSERT INTO protests (protest_id, target_id, proposer_id, amount)
                VALUES (?, ?, ?, ?)
                """,
                (
                    protest.protest_id,
                    protest.target_subject_id,
                    protest.proposer_id,
                    protest.proposed_amount,
                ),
            )
    except sqlite3.IntegrityError as exc:
        if "protests.protest_id" in str(exc):
            raise ProtestExists(protest.protest_id) from exc
        _raise_write_error(
            "protests.insert_protest", exc, details=f"protest_id={protest.protest_id!r}"
        )
    except Exception as exc:
        _raise_write_error(
            "protests.insert_protest", exc, details=f"protest_id={protest.protest_id!r}"
        )


def get_pending_protest(
    protest_id: str, *, conn: sqlite3.Connection | None = None
) -> PendingProtest | None:
    """Return the protest when it exists and is still awaiting a second."""
    try:
        with reuse_or_open(conn) as active:
            cursor = active.cursor()
            cursor.execute(
                """
                SELECT protest_id, target_id, amount, proposer_id
                FROM protests
                WHERE protest_id = ? AND status = 'proposed'
                """,
                (protest_id,),
            )
            row = cursor.fetchone()
    except Exception as exc:
        _raise_read_error("protests.get_pending_protest", exc, details=f"protest_id={protest_id!r}")

    if row is None:
        return None
    return PendingProtest(
        protest_id=str(row[0]),
        target_subject_id=str(row[1]),
        proposed_amount=int(row[2]),
        proposer_id=str(row[3]),
    )


def mark_resolved(
    protest_id: str, resolved_by: str, *, conn: sqlite3.Connection | None = None
) -> bool:
    """Transition a proposed protest to resolved.

    Returns:
        True when this call performed the transition, False when the protest
        was absent or already resolved.
    """
    try:
        with reuse_or_open(conn, write=True) as active:
            cursor = active.execute(
                """
                UPDATE protests
                SET status = 'resolved', resolved_by = ?, resolved_at = CURRENT_TIMESTAMP
                WHERE protest_id = ? AND status = 'proposed'
                """,
                (resolved_by, protest_id),
            )
            return cursor.rowcount == 1
    except Exception as exc:
        _raise_write_error("protests.mark_resolved", exc, details=f"protest_id={protest_id!r}")


def count_pending(*, conn: sqlite3.Connection | None = None) -> int:
    """Return the number of protests still awaiting a second."""
    try:
        with reuse_or_open(conn) as active:
            cursor = active.execute("SELECT COUNT(*) FROM protests WHERE status = 'proposed'")
            row = cursor.fetchone()
            return int(row[0]) if row else 0
    except Exception as exc:
        _raise_read_error("protests.count_pending", exc)
