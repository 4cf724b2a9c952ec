"""Tests for the protests table repository."""

import sqlite3
from unittest.mock import patch

import pytest

from hotdog_ledger.db import connection as db_connection
from hotdog_ledger.db import protests_repo
from hotdog_ledger.db.errors import DatabaseReadError, DatabaseWriteError
from hotdog_ledger.db.types import PendingProtest
from hotdog_ledger.errors import ProtestExists


def _protest(protest_id: str = "p1", amount: int = 3) -> PendingProtest:
    return PendingProtest(
        protest_id=protest_id,
        target_subject_id="target",
        proposed_amount=amount,
        proposer_id="proposer",
    )


@pytest.mark.db
def test_inserted_protest_is_pending(test_db):
    protests_repo.insert_protest(_protest())

    assert protests_repo.get_pending_protest("p1") == _protest()
    assert protests_repo.count_pending() == 1


@pytest.mark.db
def test_unknown_protest_is_none(test_db):
    assert protests_repo.get_pending_protest("missing") is None


@pytest.mark.db
def test_mark_resolved_transitions_exactly_once(test_db):
    protests_repo.insert_protest(_protest())

    assert protests_repo.mark_resolved("p1", "seconder") is True
    assert protests_repo.mark_resolved("p1", "someone_else") is False
    assert protests_repo.get_pending_protest("p1") is None
    assert protests_repo.count_pending() == 0


@pytest.mark.db
def test_resolution_records_who_seconded(test_db):
    protests_repo.insert_protest(_protest())
    protests_repo.mark_resolved("p1", "seconder")

    with db_connection.connection_scope() as conn:
        row = conn.execute(
            "SELECT status, resolved_by, resolved_at FROM protests WHERE protest_id = 'p1'"
        ).fetchone()

    assert row[0] == "resolved"
    assert row[1] == "seconder"
    assert row[2] is not None


@pytest.mark.db
def test_duplicate_protest_id_is_rejected_as_existing(test_db):
    protests_repo.insert_protest(_protest())

    with pytest.raises(ProtestExists) as exc_info:
        protests_repo.insert_protest(_protest(amount=5))

    assert exc_info.value.protest_id == "p1"
    assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
    assert protests_repo.get_pending_protest("p1") == _protest()


@pytest.mark.db
def test_duplicate_of_resolved_protest_is_rejected(test_db):
    protests_repo.insert_protest(_protest())
    protests_repo.mark_resolved("p1", "seconder")

    with pytest.raises(ProtestExists):
        protests_repo.insert_protest(_protest())

    assert protests_repo.count_pending() == 0


@pytest.mark.unit
@pytest.mark.db
def test_protest_helpers_raise_typed_errors_on_db_error():
    with patch.object(db_connection, "get_connection", side_effect=Exception("db error")):
        with pytest.raises(DatabaseWriteError):
            protests_repo.insert_protest(_protest())
        with pytest.raises(DatabaseReadError):
            protests_repo.get_pending_protest("p1")
        with pytest.raises(DatabaseWriteError):
            protests_repo.mark_resolved("p1", "seconder")
        with pytest.raises(DatabaseReadError):
            protests_repo.count_pending()
