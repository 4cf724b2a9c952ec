"""Schema creation and invariant trigger wiring for the SQLite backend.

The schema layer is isolated from query code so schema changes are reviewable
without wading through repository logic.

Tables:
    - ``hotdog_events``: the append-only ledger. One row per addition or
      protest correction. Rows are never updated or deleted.
    - ``protests``: pending/resolved protest proposals.

Views:
    - ``hotdog_totals``: per-subject running totals derived by grouped sum.
      The display name is taken from the subject's most recent entry.
"""

from __future__ import annotations

import logging
import sqlite3

from hotdog_ledger.db.connection import connection_scope

logger = logging.getLogger(__name__)

EVENTS_TABLE_STATEMENT = """
    CREATE TABLE IF NOT EXISTS hotdog_events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        username TEXT NOT NULL,
        amount INTEGER NOT NULL CHECK (amount != 0),
        timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
    )
"""

TOTALS_VIEW_STATEMENT = """
    CREATE VIEW IF NOT EXISTS hotdog_totals AS
    SELECT e.user_id AS user_id,
           (
               SELECT latest.username
               FROM hotdog_events latest
               WHERE latest.user_id = e.user_id
               ORDER BY latest.id DESC
               LIMIT 1
           ) AS username,
           SUM(e.amount) AS total_count
    FROM hotdog_events e
    GROUP BY e.user_id
"""

PROTESTS_TABLE_STATEMENT = """
    CREATE TABLE IF NOT EXISTS protests (
        protest_id TEXT PRIMARY KEY,
        target_id TEXT NOT NULL,
        proposer_id TEXT NOT NULL,
        amount INTEGER NOT NULL CHECK (amount > 0),
        status TEXT NOT NULL DEFAULT 'proposed'
            CHECK (status IN ('proposed', 'resolved')),
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        resolved_by TEXT,
        resolved_at TIMESTAMP
    )
"""

# Totals and per-subject lookups always filter or group by user_id.
INDEX_STATEMENTS = (
    "CREATE INDEX IF NOT EXISTS idx_hotdog_events_user_id ON hotdog_events(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_protests_status ON protests(status)",
)


def create_ledger_immutability_triggers(conn: sqlite3.Connection) -> None:
    """Create triggers that reject UPDATE and DELETE on the ledger table.

    These protect the append-only invariant for direct SQL writes as well as
    the Python repository paths.
    """
    cursor = conn.cursor()
    cursor.execute("""
        CREATE TRIGGER IF NOT EXISTS hotdog_events_no_update
        BEFORE UPDATE ON hotdog_events
        BEGIN
            SELECT RAISE(ABORT, 'hotdog_events is append-only; UPDATE is not allowed');
        END;
    """)
    cursor.execute("""
        CREATE TRIGGER IF NOT EXISTS hotdog_events_no_delete
        BEFORE DELETE ON hotdog_events
        BEGIN
            SELECT RAISE(ABORT, 'hotdog_events is append-only; DELETE is not allowed');
        END;
    """)


def init_database() -> None:
    """Create all tables, views, indexes and triggers if they don't exist.

    Safe to call on every start-up; every statement is idempotent.
    """
    with connection_scope(write=True) as conn:
        cursor = conn.cursor()
        cursor.execute(EVENTS_TABLE_STATEMENT)
        cursor.execute(PROTESTS_TABLE_STATEMENT)
        cursor.execute(TOTALS_VIEW_STATEMENT)
        for statement in INDEX_STATEMENTS:
            cursor.execute(statement)
        create_ledger_immutability_triggers(conn)
    logger.debug("Database schema ensured")
