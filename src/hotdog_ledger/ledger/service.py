"""Ledger service: the only writer to the hot dog event store.

Every successful call inserts exactly one immutable row; nothing is ever
updated. Totals returned by the service are recomputed from the
``hotdog_totals`` view after the insert, never cached.

Corrections are unconditional. Whoever calls :meth:`LedgerService.record_correction`
must already have checked that the subject's total stays non-negative, ideally
inside :meth:`LedgerService.transaction` so the check and the write cannot
interleave with another writer.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from hotdog_ledger.db import events_repo
from hotdog_ledger.db.connection import connection_scope
from hotdog_ledger.errors import InvalidAmount

logger = logging.getLogger(__name__)

DEFAULT_MAX_ADDITION = 83


def correction_placeholder_label(subject_id: str) -> str:
    """Display label used when a correction targets a subject with no entries."""
    return f"<@{subject_id}>"


class LedgerService:
    """Validate and append ledger entries; read running totals."""

    def __init__(self, *, max_addition: int = DEFAULT_MAX_ADDITION) -> None:
        self.max_addition = max_addition

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection holding SQLite's writer lock until commit.

        Pass the yielded connection as ``conn`` to the service methods to make
        a read-check-write sequence atomic.
        """
        with connection_scope(immediate=True) as conn:
            yield conn

    def get_total(self, subject_id: str, *, conn: sqlite3.Connection | None = None) -> int:
        """Return the subject's running total (0 if they have no entries)."""
        return events_repo.get_subject_total(subject_id, conn=conn)

    def record_addition(
        self,
        subject_id: str,
        display_name: str,
        amount: int,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> int:
        """Append a self-reported addition and return the subject's new total.

        Raises:
            InvalidAmount: ``amount`` is below 1 or above ``max_addition``.
                Out-of-range amounts are rejected, never clamped.
        """
        if amount < 1:
            logger.info("Rejected addition of %s for %s: not positive", amount, subject_id)
            raise InvalidAmount(
                amount,
                f"Please enter a positive integer amount of hot dogs, {display_name}. 🌭",
            )
        if amount > self.max_addition:
            logger.info("Rejected addition of %s for %s: above cap", amount, subject_id)
            raise InvalidAmount(amount, f"{amount} hot dogs? I don't believe you 🚬")

        if conn is None:
            with self.transaction() as owned:
                return self._append(subject_id, display_name, amount, owned)
        return self._append(subject_id, display_name, amount, conn)

    def record_correction(
        self,
        subject_id: str,
        amount: int,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> int:
        """Append a deduction of ``amount`` and return the subject's new total.

        ``amount`` is a positive magnitude; the stored row carries ``-amount``.
        The row is labelled with the subject's latest display name, or a
        mention placeholder when the subject has never posted.

        Raises:
            InvalidAmount: ``amount`` is below 1.
        """
        if amount < 1:
            raise InvalidAmount(amount, "Correction amount must be a positive integer.")

        if conn is None:
            with self.transaction() as owned:
                return self._append_correction(subject_id, amount, owned)
        return self._append_correction(subject_id, amount, conn)

    def _append_correction(self, subject_id: str, amount: int, conn: sqlite3.Connection) -> int:
        label = events_repo.get_latest_display_name(subject_id, conn=conn)
        if label is None:
            label = correction_placeholder_label(subject_id)
        return self._append(subject_id, label, -amount, conn)

    def _append(
        self, subject_id: str, display_name: str, amount: int, conn: sqlite3.Connection
    ) -> int:
        event_id = events_repo.insert_event(subject_id, display_name, amount, conn=conn)
        new_total = events_repo.get_subject_total(subject_id, conn=conn)
        logger.debug(
            "ledger: appended event %s (%+d) for %s, total now %d",
            event_id,
            amount,
            subject_id,
            new_total,
        )
        return new_total
