"""Shared DB-layer dataclasses for repository contracts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """
    One immutable row of the hot dog ledger.

    Attributes:
        id: Store-assigned, monotonically increasing surrogate key.
        subject_id: Opaque platform id of the user the amount applies to.
        display_name: Label captured at insert time (a snapshot, not a live
            reference).
        amount: Signed amount. Positive for additions, negative for protest
            corrections.
        recorded_at: Store-assigned UTC timestamp (timezone-aware).
    """

    id: int
    subject_id: str
    display_name: str
    amount: int
    recorded_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the column names exposed by the query API."""
        return {
            "id": self.id,
            "user_id": self.subject_id,
            "username": self.display_name,
            "amount": self.amount,
            "timestamp": self.recorded_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class SubjectTotal:
    """
    One row of the derived ``hotdog_totals`` view.

    Attributes:
        subject_id: Platform user id.
        display_name: Display name of the subject's most recent entry.
        total: Sum of all amounts for the subject.
    """

    subject_id: str
    display_name: str
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.subject_id,
            "username": self.display_name,
            "total_count": self.total,
        }


@dataclass(frozen=True, slots=True)
class PendingProtest:
    """
    A proposed corrective deduction awaiting a second.

    Attributes:
        protest_id: Interaction id of the proposing command; also the key of
            the confirming button.
        target_subject_id: User whose total would be reduced.
        proposed_amount: Positive magnitude to deduct.
        proposer_id: User who raised the protest.
    """

    protest_id: str
    target_subject_id: str
    proposed_amount: int
    proposer_id: str
