"""SQLite connection primitives for the ledger DB layer.

This module owns connection creation and low-level SQLite runtime pragmas so
repository code can stay focused on queries and transaction intent.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from hotdog_ledger.db.errors import (
    DatabaseOperationContext,
    DatabaseReadError,
    DatabaseWriteError,
)


def get_db_path() -> Path:
    """Resolve the absolute SQLite database path from runtime configuration."""
    from hotdog_ledger.config import config

    return config.database.absolute_path


def configure_connection(connection: sqlite3.Connection) -> sqlite3.Connection:
    """Apply connection-level SQLite pragmas required by the application.

    Notes:
        - ``foreign_keys=ON`` is required because SQLite does not enforce
          foreign-key constraints by default.
        - ``busy_timeout`` lets a second writer wait for ``BEGIN IMMEDIATE``
          holders instead of failing with ``database is locked``.
    """
    connection.execute("PRAGMA foreign_keys = ON")
    connection.execute("PRAGMA busy_timeout = 5000")
    return connection


def get_connection() -> sqlite3.Connection:
    """Create and configure a new SQLite connection."""
    path = get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(str(path))
    return configure_connection(connection)


def _open_connection(*, write: bool, immediate: bool) -> sqlite3.Connection:
    """Open a connection (and the immediate transaction) or raise a typed error."""
    connection: sqlite3.Connection | None = None
    try:
        connection = get_connection()
        if immediate:
            connection.execute("BEGIN IMMEDIATE")
        return connection
    except Exception as exc:
        if connection is not None:
            connection.close()
        error_type = DatabaseWriteError if write else DatabaseReadError
        raise error_type(
            context=DatabaseOperationContext(operation="connection.open"),
            cause=exc,
        ) from exc


@contextmanager
def connection_scope(
    *, write: bool = False, immediate: bool = False
) -> Iterator[sqlite3.Connection]:
    """Yield a configured connection with guaranteed cleanup semantics.

    Args:
        write: When True, commit on success and rollback on exceptions.
        immediate: When True (implies ``write``), open the transaction with
            ``BEGIN IMMEDIATE`` so the writer lock is held from the first read.
            Use this for read-check-write sequences that must not interleave.

    Yields:
        Configured SQLite connection ready for cursor operations.
    """
    write = write or immediate
    connection = _open_connection(write=write, immediate=immediate)
    try:
        yield connection
        if write:
            try:
                connection.commit()
            except sqlite3.Error as exc:
                raise DatabaseWriteError(
                    context=DatabaseOperationContext(operation="connection.commit"),
                    cause=exc,
                ) from exc
    except Exception:
        if write:
            try:
                connection.rollback()
            except sqlite3.Error:
                # Preserve the original exception while best-effort rolling back.
                pass
        raise
    finally:
        connection.close()


@contextmanager
def reuse_or_open(
    conn: sqlite3.Connection | None, *, write: bool = False
) -> Iterator[sqlite3.Connection]:
    """Yield ``conn`` unchanged when supplied, else open a fresh scope.

    Repository functions accept an optional connection so several calls can
    share one transaction. The owner of a supplied connection is responsible
    for committing and closing it.
    """
    if conn is not None:
        yield conn
        return
    with connection_scope(write=write) as owned:
        yield owned
