"""Tests for leaderboard ranking and derived statistics."""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from hotdog_ledger.db.types import LedgerEntry, SubjectTotal
from hotdog_ledger.stats.engine import (
    average_amount,
    build_leaderboard,
    largest_single_entry,
    longest_active_streak,
    rank_rows,
    rate_per_day,
    rate_per_month,
)

LA = ZoneInfo("America/Los_Angeles")

# Wednesday 2024-05-15 12:00 in Los Angeles.
NOW = datetime(2024, 5, 15, 19, 0, tzinfo=UTC)


def _entry(entry_id: int, subject: str, amount: int, at: datetime) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id,
        subject_id=subject,
        display_name=subject.title(),
        amount=amount,
        recorded_at=at,
    )


def _local_noon(days_ago: int) -> datetime:
    """Noon in Los Angeles ``days_ago`` days before NOW, as UTC."""
    local = NOW.astimezone(LA) - timedelta(days=days_ago)
    return local.replace(hour=12, minute=0).astimezone(UTC)


# ============================================================================
# RANKING
# ============================================================================


@pytest.mark.unit
def test_rank_rows_shares_rank_and_skips():
    ranked = rank_rows([50, 50, 30], lambda a, b: a == b)

    assert [rank for rank, _ in ranked] == [1, 1, 3]


@pytest.mark.unit
def test_rank_rows_tie_in_middle():
    ranked = rank_rows([50, 30, 30, 10], lambda a, b: a == b)

    assert [rank for rank, _ in ranked] == [1, 2, 2, 4]


@pytest.mark.unit
def test_rank_rows_empty():
    assert rank_rows([], lambda a, b: a == b) == []


@pytest.mark.unit
def test_build_leaderboard_orders_by_total_then_subject_id():
    rows = build_leaderboard(
        [
            SubjectTotal("carol", "Carol", 30),
            SubjectTotal("bob", "Bob", 50),
            SubjectTotal("alice", "Alice", 50),
        ]
    )

    assert [(row.rank, row.subject_id, row.total) for row in rows] == [
        (1, "alice", 50),
        (1, "bob", 50),
        (3, "carol", 30),
    ]
    assert rows[0].to_dict() == {
        "rank": 1,
        "user_id": "alice",
        "username": "Alice",
        "total_count": 50,
    }


# ============================================================================
# RATES
# ============================================================================


@pytest.mark.unit
def test_rate_per_day_empty_ledger_is_zero():
    assert rate_per_day([], NOW) == 0


@pytest.mark.unit
def test_rate_per_day_divides_by_fractional_days():
    entries = [
        _entry(1, "alice", 15, NOW - timedelta(days=10)),
        _entry(2, "bob", 5, NOW - timedelta(days=1)),
    ]

    assert rate_per_day(entries, NOW) == 2.0


@pytest.mark.unit
def test_rate_per_day_rounds_to_two_places():
    entries = [_entry(1, "alice", 10, NOW - timedelta(days=3))]

    assert rate_per_day(entries, NOW) == 3.33


@pytest.mark.unit
def test_rate_per_day_with_no_elapsed_time_returns_total():
    entries = [_entry(1, "alice", 7, NOW)]

    assert rate_per_day(entries, NOW) == 7.0


@pytest.mark.unit
def test_rate_per_month_same_month_returns_total():
    entries = [_entry(1, "alice", 12, _local_noon(3))]

    assert rate_per_month(entries, NOW, LA) == 12


@pytest.mark.unit
def test_rate_per_month_divides_by_calendar_months():
    entries = [
        _entry(1, "alice", 30, datetime(2024, 1, 20, 20, 0, tzinfo=UTC)),
        _entry(2, "bob", 10, _local_noon(1)),
    ]

    # January to May is four calendar months.
    assert rate_per_month(entries, NOW, LA) == 10.0


@pytest.mark.unit
def test_rate_per_month_uses_reference_zone_for_month_boundary():
    # 2024-04-01 03:00 UTC is still March 31 in Los Angeles.
    entries = [_entry(1, "alice", 10, datetime(2024, 4, 1, 3, 0, tzinfo=UTC))]

    assert rate_per_month(entries, NOW, LA) == 5.0
    assert rate_per_month(entries, NOW, ZoneInfo("UTC")) == 10.0


@pytest.mark.unit
def test_rate_per_month_empty_ledger_is_zero():
    assert rate_per_month([], NOW, LA) == 0


# ============================================================================
# STREAKS
# ============================================================================


@pytest.mark.unit
def test_streak_counts_back_from_today():
    entries = [
        _entry(1, "alice", 1, _local_noon(0)),
        _entry(2, "alice", 1, _local_noon(1)),
        _entry(3, "alice", 1, _local_noon(3)),
    ]

    result = longest_active_streak(entries, NOW, LA)

    assert result.subject_ids == frozenset({"alice"})
    assert result.days == 2


@pytest.mark.unit
def test_streak_may_start_yesterday():
    entries = [
        _entry(1, "alice", 1, _local_noon(1)),
        _entry(2, "alice", 1, _local_noon(2)),
        _entry(3, "alice", 1, _local_noon(3)),
    ]

    assert longest_active_streak(entries, NOW, LA).days == 3


@pytest.mark.unit
def test_lapsed_subjects_have_no_streak():
    entries = [_entry(1, "alice", 1, _local_noon(2)), _entry(2, "alice", 1, _local_noon(3))]

    result = longest_active_streak(entries, NOW, LA)

    assert result.subject_ids == frozenset()
    assert result.days == 0


@pytest.mark.unit
def test_streak_reports_every_tied_subject():
    entries = [
        _entry(1, "alice", 1, _local_noon(0)),
        _entry(2, "alice", 1, _local_noon(1)),
        _entry(3, "bob", 1, _local_noon(1)),
        _entry(4, "bob", 1, _local_noon(2)),
        _entry(5, "carol", 1, _local_noon(0)),
    ]

    result = longest_active_streak(entries, NOW, LA)

    assert result.subject_ids == frozenset({"alice", "bob"})
    assert result.days == 2


@pytest.mark.unit
def test_streak_days_are_reference_zone_days():
    # 03:00 UTC on the 15th is the evening of the 14th in Los Angeles.
    entries = [_entry(1, "alice", 1, datetime(2024, 5, 15, 3, 0, tzinfo=UTC))]

    la_result = longest_active_streak(entries, NOW, LA)
    utc_result = longest_active_streak(entries, NOW, ZoneInfo("UTC"))

    assert la_result.days == 1
    assert utc_result.days == 1
    assert longest_active_streak(entries, NOW + timedelta(days=1), LA).days == 0
    assert longest_active_streak(entries, NOW + timedelta(days=1), ZoneInfo("UTC")).days == 1


@pytest.mark.unit
def test_multiple_entries_on_one_day_count_once():
    entries = [_entry(1, "alice", 1, _local_noon(0)), _entry(2, "alice", 2, _local_noon(0))]

    assert longest_active_streak(entries, NOW, LA).days == 1


# ============================================================================
# LARGEST / AVERAGE
# ============================================================================


@pytest.mark.unit
def test_largest_entry_prefers_lowest_id_on_tie():
    entries = [
        _entry(1, "alice", 5, _local_noon(3)),
        _entry(2, "bob", 9, _local_noon(2)),
        _entry(3, "carol", 9, _local_noon(1)),
        _entry(4, "bob", -20, _local_noon(0)),
    ]

    largest = largest_single_entry(entries)

    assert largest is not None
    assert largest.id == 2


@pytest.mark.unit
def test_largest_entry_of_empty_ledger_is_none():
    assert largest_single_entry([]) is None


@pytest.mark.unit
def test_average_includes_corrections():
    entries = [_entry(1, "alice", 10, _local_noon(1)), _entry(2, "alice", -4, _local_noon(0))]

    assert average_amount(entries) == 3.0


@pytest.mark.unit
def test_average_rounds_to_two_places_and_empty_is_zero():
    entries = [
        _entry(1, "alice", 1, _local_noon(0)),
        _entry(2, "alice", 1, _local_noon(0)),
        _entry(3, "alice", 2, _local_noon(0)),
    ]

    assert average_amount(entries) == 1.33
    assert average_amount([]) == 0


# ============================================================================
# STORE-BACKED ENGINE
# ============================================================================


@pytest.mark.db
def test_stats_bundle_on_empty_ledger(stats):
    bundle = stats.stats_bundle()

    assert bundle == {
        "totalDogsConsumed": 0,
        "dogsPerDay": 0,
        "dogsPerMonth": 0,
        "longestDailyStreak": {"userIds": [], "usernames": [], "days": 0},
        "largestSingleSessionSubmission": {
            "userId": None,
            "username": None,
            "amount": 0,
            "timestamp": None,
        },
        "averageAmountPerDbRow": 0,
    }


@pytest.mark.db
def test_stats_bundle_from_ledger(stats, add_event):
    add_event("alice", "Alice", 10, at=NOW - timedelta(days=2))
    add_event("bob", "Bob", 6, at=NOW - timedelta(days=1))
    add_event("alice", "Alice G", -4, at=NOW)

    bundle = stats.stats_bundle()

    assert bundle["totalDogsConsumed"] == 12
    assert bundle["dogsPerDay"] == 6.0
    assert bundle["dogsPerMonth"] == 12
    assert bundle["longestDailyStreak"] == {
        "userIds": ["alice", "bob"],
        "usernames": ["Alice G", "Bob"],
        "days": 1,
    }
    assert bundle["largestSingleSessionSubmission"]["userId"] == "alice"
    assert bundle["largestSingleSessionSubmission"]["amount"] == 10
    assert bundle["averageAmountPerDbRow"] == 4.0


@pytest.mark.db
def test_engine_leaderboard_and_total(stats, add_event):
    add_event("alice", "Alice", 50)
    add_event("bob", "Bob", 50)
    add_event("carol", "Carol", 30)

    assert [row.rank for row in stats.leaderboard()] == [1, 1, 3]
    assert stats.total_across_all_subjects() == 130
