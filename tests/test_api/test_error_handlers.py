"""Tests for the application-level exception handlers."""

import pytest
from fastapi.testclient import TestClient

from hotdog_ledger.api.server import create_app, status_for_ledger_error
from hotdog_ledger.db.errors import DatabaseOperationContext, DatabaseWriteError
from hotdog_ledger.errors import (
    InvalidAmount,
    LedgerError,
    NoSuchProtest,
    ProtestExists,
    SelfConfirmation,
    WouldGoNegative,
)
from hotdog_ledger.interactions.commands import UnknownCommand

LEDGER_ERRORS = {
    "invalid": (InvalidAmount(0), 400, "Invalid amount: 0."),
    "negative": (
        WouldGoNegative("a", 3, 4),
        400,
        "Cannot protest 4 hot dogs from <@a> (current total: 3). "
        "This would result in a negative count.",
    ),
    "self": (SelfConfirmation("k"), 403, "You cannot second your own protest."),
    "missing": (NoSuchProtest("k"), 404, "This protest is no longer open."),
    "duplicate": (ProtestExists("k"), 409, "This protest has already been submitted."),
}


@pytest.fixture
def failing_client(services) -> TestClient:
    """App with an extra route that raises the error named in the path."""
    app = create_app(services)

    def fail(kind: str):
        if kind == "store":
            raise DatabaseWriteError(
                context=DatabaseOperationContext(operation="events.insert_event"),
                cause=RuntimeError("disk full"),
            )
        if kind == "command":
            raise UnknownCommand("unknown command")
        raise LEDGER_ERRORS[kind][0]

    app.add_api_route("/fail/{kind}", fail, methods=["GET"])
    return TestClient(app)


@pytest.mark.api
@pytest.mark.parametrize("kind", sorted(LEDGER_ERRORS))
def test_ledger_errors_map_to_status_and_error_body(failing_client, kind):
    _, status_code, message = LEDGER_ERRORS[kind]

    response = failing_client.get(f"/fail/{kind}")

    assert response.status_code == status_code
    assert response.json() == {"error": message}


@pytest.mark.api
def test_store_failure_is_500(failing_client):
    response = failing_client.get("/fail/store")

    assert response.status_code == 500
    assert response.json() == {"error": "datastore unavailable"}


@pytest.mark.api
def test_unknown_command_is_400(failing_client):
    response = failing_client.get("/fail/command")

    assert response.status_code == 400
    assert response.json() == {"error": "unknown command"}


@pytest.mark.unit
def test_unmapped_ledger_error_defaults_to_400():
    assert status_for_ledger_error(LedgerError("nope")) == 400
