"""Derived statistics over the hot dog ledger.

Everything here is read-only and recomputed per call. The module is split in
two layers:

- Pure functions (``rank_rows``, ``build_leaderboard``, ``rate_per_day``,
  ``rate_per_month``, ``longest_active_streak``, ``largest_single_entry``,
  ``average_amount``) that take entries and an explicit ``now``. They never
  touch the database, so tests can feed them hand-built ledgers.
- :class:`StatisticsEngine`, which loads a snapshot from the event store and
  delegates to the pure functions.

Time handling
-------------
Stored timestamps are UTC. Calendar questions (which day did this happen on,
how many months have passed) are answered in a fixed reference zone supplied
by configuration (``ledger.reference_timezone``), never the host's local zone.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any, TypeVar
from zoneinfo import ZoneInfo

from hotdog_ledger.db import events_repo
from hotdog_ledger.db.types import LedgerEntry, SubjectTotal

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class LeaderboardRow:
    """One ranked leaderboard line."""

    rank: int
    subject_id: str
    display_name: str
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "user_id": self.subject_id,
            "username": self.display_name,
            "total_count": self.total,
        }


@dataclass(frozen=True, slots=True)
class StreakResult:
    """
    Longest active daily streak across all subjects.

    Attributes:
        subject_ids: Every subject tied at the maximum length. Empty when no
            subject has an active streak.
        days: Streak length in consecutive reference-zone calendar days.
    """

    subject_ids: frozenset[str]
    days: int


# ============================================================================
# PURE FUNCTIONS
# ============================================================================


def rank_rows(rows: Sequence[T], tied: Callable[[T, T], bool]) -> list[tuple[int, T]]:
    """Assign standard competition ranks ("1224" ranking) to pre-sorted rows.

    A row tied with the first row of the current tie group shares that group's
    rank; the first row of the next group takes its 1-based position. Totals
    ``[50, 50, 30]`` therefore rank ``[1, 1, 3]``.

    Args:
        rows: Rows already sorted best-first.
        tied: Predicate deciding whether two rows share a rank.
    """
    ranked: list[tuple[int, T]] = []
    group_leader: T | None = None
    group_rank = 0
    for position, row in enumerate(rows, start=1):
        if group_leader is None or not tied(group_leader, row):
            group_leader = row
            group_rank = position
        ranked.append((group_rank, row))
    return ranked


def build_leaderboard(totals: Iterable[SubjectTotal]) -> list[LeaderboardRow]:
    """Sort totals descending (subject id breaks ties) and rank them."""
    ordered = sorted(totals, key=lambda row: (-row.total, row.subject_id))
    return [
        LeaderboardRow(
            rank=rank,
            subject_id=row.subject_id,
            display_name=row.display_name,
            total=row.total,
        )
        for rank, row in rank_rows(ordered, lambda a, b: a.total == b.total)
    ]


def _earliest(entries: Sequence[LedgerEntry]) -> datetime:
    return min(entry.recorded_at for entry in entries)


def rate_per_day(entries: Sequence[LedgerEntry], now: datetime) -> float:
    """Total amount divided by fractional days elapsed since the first entry.

    Elapsed time is plain wall-clock arithmetic, not calendar days. Returns 0
    for an empty ledger and the raw total when no time has elapsed yet.
    """
    if not entries:
        return 0
    total = sum(entry.amount for entry in entries)
    elapsed_days = (now - _earliest(entries)).total_seconds() / _SECONDS_PER_DAY
    if elapsed_days <= 0:
        return float(total)
    return round(total / elapsed_days, 2)


def rate_per_month(entries: Sequence[LedgerEntry], now: datetime, zone: ZoneInfo) -> float:
    """Total amount divided by calendar months since the first entry.

    Months are counted as ``year * 12 + month`` differences in ``zone``. When
    the first entry falls in the current month the raw total is returned
    rather than dividing by zero or a fraction of a month.
    """
    if not entries:
        return 0
    total = sum(entry.amount for entry in entries)
    first = _earliest(entries).astimezone(zone)
    current = now.astimezone(zone)
    months_elapsed = (current.year * 12 + current.month) - (first.year * 12 + first.month)
    if months_elapsed > 0:
        return round(total / months_elapsed, 2)
    return total


def local_day(moment: datetime, zone: ZoneInfo) -> date:
    """Calendar day of ``moment`` in ``zone``."""
    return moment.astimezone(zone).date()


def longest_active_streak(
    entries: Iterable[LedgerEntry], now: datetime, zone: ZoneInfo
) -> StreakResult:
    """Find the longest run of consecutive active days ending today or yesterday.

    A subject's streak counts backwards from today (or from yesterday when
    they have nothing today) while each day has at least one entry. Subjects
    with no entry today or yesterday have no active streak. All subjects tied
    at the maximum are reported.
    """
    days_by_subject: dict[str, set[date]] = {}
    for entry in entries:
        days_by_subject.setdefault(entry.subject_id, set()).add(
            local_day(entry.recorded_at, zone)
        )

    today = local_day(now, zone)
    yesterday = today - timedelta(days=1)

    best_days = 0
    leaders: set[str] = set()
    for subject_id, active_days in days_by_subject.items():
        if today in active_days:
            cursor = today
        elif yesterday in active_days:
            cursor = yesterday
        else:
            continue

        streak = 0
        while cursor in active_days:
            streak += 1
            cursor -= timedelta(days=1)

        if streak > best_days:
            best_days = streak
            leaders = {subject_id}
        elif streak == best_days:
            leaders.add(subject_id)

    return StreakResult(subject_ids=frozenset(leaders), days=best_days)


def largest_single_entry(entries: Iterable[LedgerEntry]) -> LedgerEntry | None:
    """Entry with the largest amount; the lowest id wins ties."""
    best: LedgerEntry | None = None
    for entry in entries:
        if (
            best is None
            or entry.amount > best.amount
            or (entry.amount == best.amount and entry.id < best.id)
        ):
            best = entry
    return best


def average_amount(entries: Sequence[LedgerEntry]) -> float:
    """Mean amount per row, corrections included, rounded to 2 places."""
    if not entries:
        return 0
    return round(sum(entry.amount for entry in entries) / len(entries), 2)


def latest_display_names(entries: Iterable[LedgerEntry]) -> dict[str, str]:
    """Map each subject to the display name on their highest-id entry."""
    latest: dict[str, LedgerEntry] = {}
    for entry in entries:
        current = latest.get(entry.subject_id)
        if current is None or entry.id > current.id:
            latest[entry.subject_id] = entry
    return {subject_id: entry.display_name for subject_id, entry in latest.items()}


# ============================================================================
# STORE-BACKED ENGINE
# ============================================================================


def _utc_now() -> datetime:
    return datetime.now(UTC)


class StatisticsEngine:
    """Compute statistics from the event store on demand.

    Args:
        zone: Reference zone for calendar-day and calendar-month bucketing.
        clock: Returns the current aware datetime; tests inject a fixed one.
    """

    def __init__(self, zone: ZoneInfo, *, clock: Callable[[], datetime] = _utc_now) -> None:
        self.zone = zone
        self.clock = clock

    def leaderboard(self) -> list[LeaderboardRow]:
        return build_leaderboard(events_repo.list_totals())

    def total_across_all_subjects(self) -> int:
        return sum(row.total for row in events_repo.list_totals())

    def consumption_rate_per_day(self) -> float:
        return rate_per_day(self._entries(), self.clock())

    def consumption_rate_per_month(self) -> float:
        return rate_per_month(self._entries(), self.clock(), self.zone)

    def longest_active_streak(self) -> StreakResult:
        return longest_active_streak(self._entries(), self.clock(), self.zone)

    def largest_single_entry(self) -> LedgerEntry | None:
        return largest_single_entry(self._entries())

    def average_amount_per_entry(self) -> float:
        return average_amount(self._entries())

    def stats_bundle(self) -> dict[str, Any]:
        """Compute every statistic from one consistent ledger snapshot.

        Keys match the public query API:
        ``totalDogsConsumed``, ``dogsPerDay``, ``dogsPerMonth``,
        ``longestDailyStreak``, ``largestSingleSessionSubmission`` and
        ``averageAmountPerDbRow``.
        """
        entries = self._entries()
        now = self.clock()
        names = latest_display_names(entries)

        streak = longest_active_streak(entries, now, self.zone)
        streak_ids = sorted(streak.subject_ids)

        largest = largest_single_entry(entries)
        if largest is None:
            largest_payload: dict[str, Any] = {
                "userId": None,
                "username": None,
                "amount": 0,
                "timestamp": None,
            }
        else:
            largest_payload = {
                "userId": largest.subject_id,
                "username": largest.display_name,
                "amount": largest.amount,
                "timestamp": largest.recorded_at.isoformat(),
            }

        return {
            "totalDogsConsumed": sum(entry.amount for entry in entries),
            "dogsPerDay": rate_per_day(entries, now),
            "dogsPerMonth": rate_per_month(entries, now, self.zone),
            "longestDailyStreak": {
                "userIds": streak_ids,
                "usernames": [names[subject_id] for subject_id in streak_ids],
                "days": streak.days,
            },
            "largestSingleSessionSubmission": largest_payload,
            "averageAmountPerDbRow": average_amount(entries),
        }

    def _entries(self) -> list[LedgerEntry]:
        entries = events_repo.list_events(newest_first=False)
        logger.debug("stats: loaded %d ledger entries", len(entries))
        return entries
