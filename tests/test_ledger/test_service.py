"""Tests for LedgerService validation and append behaviour."""

from unittest.mock import patch

import pytest

from hotdog_ledger.db import connection as db_connection
from hotdog_ledger.db import events_repo
from hotdog_ledger.errors import InvalidAmount, StoreUnavailable
from hotdog_ledger.ledger.service import LedgerService, correction_placeholder_label


@pytest.mark.db
def test_record_addition_returns_new_total(ledger):
    assert ledger.record_addition("u1", "Alice", 5) == 5
    assert ledger.record_addition("u1", "Alice", 3) == 8


@pytest.mark.db
@pytest.mark.parametrize("amount", [0, -1, -50])
def test_record_addition_rejects_non_positive(ledger, amount):
    with pytest.raises(InvalidAmount) as exc_info:
        ledger.record_addition("u1", "Alice", amount)

    assert exc_info.value.user_message == (
        "Please enter a positive integer amount of hot dogs, Alice. 🌭"
    )
    assert events_repo.list_events() == []


@pytest.mark.db
def test_record_addition_cap_is_inclusive(ledger):
    assert ledger.record_addition("u1", "Alice", 83) == 83


@pytest.mark.db
def test_record_addition_rejects_above_cap_without_clamping(ledger):
    with pytest.raises(InvalidAmount) as exc_info:
        ledger.record_addition("u1", "Alice", 84)

    assert exc_info.value.user_message == "84 hot dogs? I don't believe you 🚬"
    assert ledger.get_total("u1") == 0


@pytest.mark.db
def test_custom_cap(test_db):
    ledger = LedgerService(max_addition=10)

    with pytest.raises(InvalidAmount):
        ledger.record_addition("u1", "Alice", 11)
    assert ledger.record_addition("u1", "Alice", 10) == 10


@pytest.mark.db
def test_record_correction_stores_negative_row_under_latest_name(ledger):
    ledger.record_addition("u1", "alice", 5)
    ledger.record_addition("u1", "Alice G", 5)

    new_total = ledger.record_correction("u1", 3)

    assert new_total == 7
    newest = events_repo.list_events()[0]
    assert newest.amount == -3
    assert newest.display_name == "Alice G"


@pytest.mark.db
def test_record_correction_uses_placeholder_for_unknown_subject(ledger):
    ledger.record_correction("ghost", 2)

    (entry,) = events_repo.list_events()
    assert entry.display_name == correction_placeholder_label("ghost") == "<@ghost>"
    assert ledger.get_total("ghost") == -2


@pytest.mark.db
def test_record_correction_rejects_non_positive(ledger):
    with pytest.raises(InvalidAmount):
        ledger.record_correction("u1", 0)


@pytest.mark.db
def test_transaction_shares_one_connection(ledger):
    with ledger.transaction() as conn:
        ledger.record_addition("u1", "Alice", 4, conn=conn)
        assert ledger.get_total("u1", conn=conn) == 4

    assert ledger.get_total("u1") == 4


@pytest.mark.db
def test_transaction_rolls_back_on_error(ledger):
    with pytest.raises(RuntimeError):
        with ledger.transaction() as conn:
            ledger.record_addition("u1", "Alice", 4, conn=conn)
            raise RuntimeError("boom")

    assert ledger.get_total("u1") == 0


@pytest.mark.db
def test_store_failure_surfaces_as_store_unavailable(ledger):
    with patch.object(db_connection, "get_connection", side_effect=Exception("db error")):
        with pytest.raises(StoreUnavailable):
            ledger.record_addition("u1", "Alice", 1)
        with pytest.raises(StoreUnavailable):
            ledger.get_total("u1")
