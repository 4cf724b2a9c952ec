"""Ledger event repository operations.

This is the only module that reads or writes the ``hotdog_events`` table and
the ``hotdog_totals`` view. Every public function accepts an optional
``conn`` so callers can compose several reads and one insert inside a single
transaction (see :func:`hotdog_ledger.db.connection.connection_scope`).
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from typing import NoReturn

from hotdog_ledger.db.connection import reuse_or_open
from hotdog_ledger.db.errors import (
    DatabaseOperationContext,
    DatabaseReadError,
    DatabaseWriteError,
    StoreUnavailable,
)
from hotdog_ledger.db.types import LedgerEntry, SubjectTotal

# SQLite's CURRENT_TIMESTAMP format (always UTC).
_SQLITE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_EVENT_COLUMNS = "id, user_id, username, amount, timestamp"


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


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse a stored timestamp into an aware UTC datetime.

    Accepts SQLite ``CURRENT_TIMESTAMP`` text as well as ISO-8601 strings.
    Naive values are assumed to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.strptime(value, _SQLITE_TIMESTAMP_FORMAT)
        except ValueError:
            parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Format a datetime in the store's UTC text representation."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime(_SQLITE_TIMESTAMP_FORMAT)


def _row_to_entry(row: tuple) -> LedgerEntry:
    event_id, user_id, username, amount, timestamp = row
    return LedgerEntry(
        id=int(event_id),
        subject_id=str(user_id),
        display_name=str(username),
        amount=int(amount),
        recorded_at=parse_timestamp(timestamp),
    )


def insert_event(
    subject_id: str,
    display_name: str,
    amount: int,
    *,
    recorded_at: datetime | None = None,
    conn: sqlite3.Connection | None = None,
) -> int:
    """Append one ledger row and return its id.

    ``recorded_at`` is normally left to the store (``CURRENT_TIMESTAMP``); it
    exists for backfills and imports.
    """
    try:
        with reuse_or_open(conn, write=True) as active:
            cursor = active.cursor()
            if recorded_at is None:
                cursor.execute(
                    "INSERT INTO hotdog_events (user_id, username, amount) VALUES (?, ?, ?)",
                    (subject_id, display_name, amount),
                )
            else:
                cursor.execute(
                    """
                    INSERT INTO hotdog_events (user_id, username, amount, timestamp)
                    VALUES (?, ?, ?, ?)
                    """,
                    (subject_id, display_name, amount, format_timestamp(recorded_at)),
                )
            event_id = cursor.lastrowid
            if event_id is None:
                raise ValueError("Failed to create hotdog event.")
            return int(event_id)
    except Exception as exc:
        _raise_write_error(
            "events.insert_event",
            exc,
            details=f"subject_id={subject_id!r}, amount={amount!r}",
        )


def get_subject_total(subject_id: str, *, conn: sqlite3.Connection | None = None) -> int:
    """Return the subject's running total, or 0 when they have no entries."""
    try:
        with reuse_or_open(conn) as active:
            cursor = active.cursor()
            cursor.execute(
                "SELECT total_count FROM hotdog_totals WHERE user_id = ?",
                (subject_id,),
            )
            row = cursor.fetchone()
            return int(row[0]) if row and row[0] is not None else 0
    except Exception as exc:
        _raise_read_error("events.get_subject_total", exc, details=f"subject_id={subject_id!r}")


def get_latest_display_name(
    subject_id: str, *, conn: sqlite3.Connection | None = None
) -> str | None:
    """Return the display name of the subject's most recent entry, if any."""
    try:
        with reuse_or_open(conn) as active:
            cursor = active.cursor()
            cursor.execute(
                "SELECT username FROM hotdog_totals WHERE user_id = ?",
                (subject_id,),
            )
            row = cursor.fetchone()
            return str(row[0]) if row and row[0] is not None else None
    except Exception as exc:
        _raise_read_error(
            "events.get_latest_display_name", exc, details=f"subject_id={subject_id!r}"
        )


def list_totals(*, conn: sqlite3.Connection | None = None) -> list[SubjectTotal]:
    """Return every subject's total, highest first (ties by subject id)."""
    try:
        with reuse_or_open(conn) as active:
            cursor = active.cursor()
            cursor.execute("""
                SELECT user_id, username, total_count
                FROM hotdog_totals
                ORDER BY total_count DESC, user_id ASC
            """)
            return [
                SubjectTotal(subject_id=str(user_id), display_name=str(username), total=int(total))
                for user_id, username, total in cursor.fetchall()
            ]
    except Exception as exc:
        _raise_read_error("events.list_totals", exc)


def list_events(
    *, newest_first: bool = True, conn: sqlite3.Connection | None = None
) -> list[LedgerEntry]:
    """Return the full ledger.

    Args:
        newest_first: Order by timestamp descending (id breaks ties) when
            True, else oldest first.
    """
    direction = "DESC" if newest_first else "ASC"
    query = f"""
        SELECT {_EVENT_COLUMNS}
        FROM hotdog_events
        ORDER BY timestamp {direction}, id {direction}
        """  # nosec B608
    try:
        with reuse_or_open(conn) as active:
            cursor = active.cursor()
            cursor.execute(query)
            return [_row_to_entry(row) for row in cursor.fetchall()]
    except Exception as exc:
        _raise_read_error("events.list_events", exc)
