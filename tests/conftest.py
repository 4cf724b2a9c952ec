"""
Shared pytest fixtures for the hot dog ledger test suite.

This module provides fixtures that are automatically available to all test files:
- Temporary, fully initialised SQLite databases
- Ledger, statistics and protest service instances
- A FastAPI TestClient wired to those services
- Helpers for writing ledger rows with controlled timestamps

Every database fixture is function-scoped so tests never share ledger state.
"""

import shutil
import tempfile
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from hotdog_ledger.config import use_test_database
from hotdog_ledger.db import events_repo, schema
from hotdog_ledger.interactions.commands import CommandDispatcher
from hotdog_ledger.ledger.service import LedgerService
from hotdog_ledger.protest.coordinator import ProtestCoordinator
from hotdog_ledger.protest.store import SqliteProtestStore
from hotdog_ledger.services import BotServices
from hotdog_ledger.stats.engine import StatisticsEngine

REFERENCE_ZONE = ZoneInfo("America/Los_Angeles")

# Wednesday 2024-05-15 12:00 in Los Angeles.
FIXED_NOW = datetime(2024, 5, 15, 19, 0, tzinfo=UTC)

# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[Path, None, None]:
    """
    Create a temporary database path for testing.

    Uses the config system's use_test_database context manager so every
    connection opened during the test points at the temporary file.

    Yields:
        Path to temporary database file
    """
    temp_dir = tempfile.mkdtemp()
    temp_db = Path(temp_dir) / "test_hotdogs.db"

    with use_test_database(temp_db):
        yield temp_db

    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(scope="function")
def test_db(temp_db_path: Path) -> Generator[None, None, None]:
    """Initialize the production schema in the temporary database."""
    schema.init_database()
    yield


@pytest.fixture
def add_event(test_db) -> Callable[..., int]:
    """
    Insert a ledger row directly, bypassing validation.

    Usage:
        add_event("u1", "Alice", 5, at=datetime(2024, 5, 1, tzinfo=UTC))
    """

    def _add(subject_id: str, display_name: str, amount: int, *, at: datetime | None = None):
        return events_repo.insert_event(subject_id, display_name, amount, recorded_at=at)

    return _add


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def ledger(test_db) -> LedgerService:
    return LedgerService(max_addition=83)


@pytest.fixture
def stats(test_db) -> StatisticsEngine:
    """Statistics engine with a frozen clock (see ``FIXED_NOW``)."""
    return StatisticsEngine(REFERENCE_ZONE, clock=lambda: FIXED_NOW)


@pytest.fixture
def coordinator(ledger: LedgerService) -> ProtestCoordinator:
    return ProtestCoordinator(ledger, SqliteProtestStore())


@pytest.fixture
def dispatcher(
    ledger: LedgerService, stats: StatisticsEngine, coordinator: ProtestCoordinator
) -> CommandDispatcher:
    return CommandDispatcher(ledger, stats, coordinator)


@pytest.fixture
def services(
    ledger: LedgerService,
    stats: StatisticsEngine,
    coordinator: ProtestCoordinator,
    dispatcher: CommandDispatcher,
) -> BotServices:
    return BotServices(ledger=ledger, stats=stats, coordinator=coordinator, dispatcher=dispatcher)


@pytest.fixture(scope="function")
def test_client(services: BotServices) -> TestClient:
    """
    Create a FastAPI TestClient for API endpoint testing.

    Example:
        def test_totals(test_client):
            response = test_client.get("/api/hotdog-totals")
            assert response.status_code == 200
    """
    from hotdog_ledger.api.server import create_app

    return TestClient(create_app(services))
