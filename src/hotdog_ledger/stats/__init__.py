"""Read-side statistics derived from the hot dog ledger."""

from hotdog_ledger.stats.engine import (
    LeaderboardRow,
    StatisticsEngine,
    StreakResult,
    build_leaderboard,
    rank_rows,
)

__all__ = [
    "LeaderboardRow",
    "StatisticsEngine",
    "StreakResult",
    "build_leaderboard",
    "rank_rows",
]
