"""
Pydantic response models for the read-only HTTP API.

Field names mirror the JSON the bot has always published so existing
dashboards keep working: snake_case for ledger rows and camelCase for the
statistics bundle.
"""

from pydantic import BaseModel

# ============================================================================
# LEDGER ROWS
# ============================================================================


class HotdogTotal(BaseModel):
    """
    One subject's running total.

    Attributes:
        user_id: Platform id of the subject
        username: Display name from the subject's most recent entry
        total_count: Sum of every entry for the subject
    """

    user_id: str
    username: str
    total_count: int


class HotdogEvent(BaseModel):
    """
    One immutable ledger entry.

    Attributes:
        id: Store-assigned surrogate key
        user_id: Platform id of the subject
        username: Display name captured when the entry was written
        amount: Signed amount (negative for protest corrections)
        timestamp: ISO-8601 UTC timestamp
    """

    id: int
    user_id: str
    username: str
    amount: int
    timestamp: str


# ============================================================================
# STATISTICS
# ============================================================================


class DailyStreak(BaseModel):
    """Longest active streak; every tied subject is listed."""

    userIds: list[str]
    usernames: list[str]
    days: int


class LargestSubmission(BaseModel):
    """Single largest entry, or nulls with amount 0 for an empty ledger."""

    userId: str | None
    username: str | None
    amount: int
    timestamp: str | None


class StatsResponse(BaseModel):
    totalDogsConsumed: int
    dogsPerDay: float
    dogsPerMonth: float
    longestDailyStreak: DailyStreak
    largestSingleSessionSubmission: LargestSubmission
    averageAmountPerDbRow: float


# ============================================================================
# SERVICE
# ============================================================================


class HealthResponse(BaseModel):
    status: str
    pending_protests: int


class ErrorResponse(BaseModel):
    error: str
