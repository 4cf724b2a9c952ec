"""Two-party protest workflow: propose a deduction, then have someone second it.

State machine per protest key::

    NONE --propose--> PROPOSED --confirm--> RESOLVED (terminal)

A protest exists so that a single user cannot unilaterally shrink another
user's total: a second, different user has to ratify it.

Consistency
-----------
``propose`` checks that the target's total covers the deduction, but totals
can move before anybody seconds it (another protest may land first). ``confirm``
therefore re-validates inside the same ``BEGIN IMMEDIATE`` transaction that
writes the correction and marks the protest resolved. If the total no longer
covers the amount, the confirmation is rejected with
:class:`~hotdog_ledger.errors.WouldGoNegative` and the protest stays open.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hotdog_ledger.db.types import PendingProtest
from hotdog_ledger.errors import (
    InvalidAmount,
    NoSuchProtest,
    SelfConfirmation,
    StoreUnavailable,
    WouldGoNegative,
)
from hotdog_ledger.ledger.service import LedgerService
from hotdog_ledger.protest.store import PendingProtestStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProtestResolution:
    """
    Outcome of a successful confirmation.

    Attributes:
        protest: The protest that was resolved.
        confirmer_id: User who seconded it.
        new_total: Target's total after the correction.
    """

    protest: PendingProtest
    confirmer_id: str
    new_total: int


class ProtestCoordinator:
    """Own the pending-protest store and drive the propose/confirm protocol."""

    def __init__(self, ledger: LedgerService, store: PendingProtestStore) -> None:
        self.ledger = ledger
        self.store = store

    def propose(
        self,
        protest_id: str,
        proposer_id: str,
        target_subject_id: str,
        amount: int,
    ) -> PendingProtest:
        """Open a protest against ``target_subject_id`` for ``amount``.

        Raises:
            InvalidAmount: ``amount`` is below 1.
            WouldGoNegative: the target's current total is smaller than
                ``amount``. No protest is stored.
            ProtestExists: ``protest_id`` was already proposed.
        """
        if amount < 1:
            raise InvalidAmount(
                amount, "Please enter a positive integer amount of hot dogs to protest. 🌭"
            )

        current_total = self.ledger.get_total(target_subject_id)
        if current_total - amount < 0:
            logger.info(
                "Rejected protest %s: %s has %d, asked to deduct %d",
                protest_id,
                target_subject_id,
                current_total,
                amount,
            )
            raise WouldGoNegative(target_subject_id, current_total, amount)

        protest = PendingProtest(
            protest_id=protest_id,
            target_subject_id=target_subject_id,
            proposed_amount=amount,
            proposer_id=proposer_id,
        )
        self.store.add(protest)
        logger.info(
            "Protest %s opened by %s against %s for %d",
            protest_id,
            proposer_id,
            target_subject_id,
            amount,
        )
        return protest

    def confirm(self, protest_id: str, confirmer_id: str) -> ProtestResolution:
        """Second a protest, applying its correction exactly once.

        Raises:
            NoSuchProtest: the key was never proposed or is already resolved.
            SelfConfirmation: ``confirmer_id`` raised the protest.
            WouldGoNegative: the target's total no longer covers the amount.
                The protest remains open.
            StoreUnavailable: the datastore failed. Nothing is applied and the
                protest remains open.
        """
        resolved: PendingProtest | None = None
        try:
            with self.ledger.transaction() as conn:
                protest = self.store.get(protest_id, conn=conn)
                if protest is None:
                    raise NoSuchProtest(protest_id)
                if confirmer_id == protest.proposer_id:
                    raise SelfConfirmation(protest_id)

                current_total = self.ledger.get_total(protest.target_subject_id, conn=conn)
                if current_total - protest.proposed_amount < 0:
                    logger.info(
                        "Protest %s can no longer be applied: %s has %d",
                        protest_id,
                        protest.target_subject_id,
                        current_total,
                    )
                    raise WouldGoNegative(
                        protest.target_subject_id, current_total, protest.proposed_amount
                    )

                new_total = self.ledger.record_correction(
                    protest.target_subject_id, protest.proposed_amount, conn=conn
                )
                # Raising here rolls the correction back with the transaction.
                if not self.store.resolve(protest_id, confirmer_id, conn=conn):
                    raise NoSuchProtest(protest_id)
                resolved = protest
        except StoreUnavailable:
            # Commit failed after the store let go of the protest.
            if resolved is not None:
                self.store.reopen(resolved)
            raise

        logger.info(
            "Protest %s seconded by %s; %s now has %d",
            protest_id,
            confirmer_id,
            protest.target_subject_id,
            new_total,
        )
        return ProtestResolution(protest=protest, confirmer_id=confirmer_id, new_total=new_total)

    def get_pending(self, protest_id: str) -> PendingProtest | None:
        """Return the protest if it is still awaiting a second."""
        return self.store.get(protest_id)
