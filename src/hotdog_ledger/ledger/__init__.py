"""Ledger package — validated appends to the hot dog event store.

Public surface
--------------
- :class:`LedgerService` — record additions and corrections, read totals.
- :func:`correction_placeholder_label` — label for corrections on subjects
  with no prior entries.
"""

from hotdog_ledger.ledger.service import LedgerService, correction_placeholder_label

__all__ = ["LedgerService", "correction_placeholder_label"]
