"""Domain exceptions raised by the ledger service and protest coordinator.

These represent rejected requests, never infrastructure faults. Datastore
failures are raised as :class:`hotdog_ledger.db.errors.StoreUnavailable`
instead, and are re-exported here so callers can import every error kind
from one place.

Each exception carries a ``user_message`` suitable for a chat reply; the
command dispatcher uses it verbatim.
"""

from __future__ import annotations

from hotdog_ledger.db.errors import StoreUnavailable

__all__ = [
    "LedgerError",
    "InvalidAmount",
    "WouldGoNegative",
    "SelfConfirmation",
    "NoSuchProtest",
    "ProtestExists",
    "StoreUnavailable",
]


class LedgerError(Exception):
    """Base class for rejected ledger operations."""

    def __init__(self, user_message: str) -> None:
        super().__init__(user_message)
        self.user_message = user_message


class InvalidAmount(LedgerError):
    """Amount is non-positive or above the configured addition cap."""

    def __init__(self, amount: int, user_message: str | None = None) -> None:
        super().__init__(user_message or f"Invalid amount: {amount}.")
        self.amount = amount


class WouldGoNegative(LedgerError):
    """A correction would push a subject's total below zero."""

    def __init__(self, subject_id: str, current_total: int, amount: int) -> None:
        super().__init__(
            f"Cannot protest {amount} hot dogs from <@{subject_id}> "
            f"(current total: {current_total}). This would result in a negative count."
        )
        self.subject_id = subject_id
        self.current_total = current_total
        self.amount = amount


class SelfConfirmation(LedgerError):
    """The confirming actor is the protest's proposer."""

    def __init__(self, protest_id: str) -> None:
        super().__init__("You cannot second your own protest.")
        self.protest_id = protest_id


class NoSuchProtest(LedgerError):
    """Protest key is unknown or already resolved."""

    def __init__(self, protest_id: str) -> None:
        super().__init__("This protest is no longer open.")
        self.protest_id = protest_id


class ProtestExists(LedgerError):
    """A protest with this key was already proposed (redelivered interaction)."""

    def __init__(self, protest_id: str) -> None:
        super().__init__("This protest has already been submitted.")
        self.protest_id = protest_id
