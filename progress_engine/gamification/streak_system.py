"""
Day Streak Calculation

A streak is the number of consecutive calendar days, ending today, on which
the user logged a qualifying activity (check-ins).

Rules:
- Today may be missing without breaking the streak; the user may simply not
  have logged yet.
- Any missing day before today ends the streak.
- The walk back from today stops after STREAK_LOOKBACK_DAYS days.
"""

from typing import Iterable, Optional
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo
import logging

from progress_engine.config import STREAK_LOOKBACK_DAYS, STREAK_TIMEZONE

logger = logging.getLogger(__name__)

STREAK_COLLECTION = "check_ins"
STREAK_DATE_FIELD = "check_in_date"


def local_today(tz_name: str = STREAK_TIMEZONE) -> date:
    """Current calendar date in the configured streak timezone"""
    return datetime.now(ZoneInfo(tz_name)).date()


def compute_streak(
    activity_dates: Iterable[date],
    today: date,
    horizon_days: int = STREAK_LOOKBACK_DAYS
) -> int:
    """
    Count consecutive activity days ending today

    Args:
        activity_dates: Days with at least one qualifying activity (any order, duplicates ok)
        today: The day the streak ends on
        horizon_days: How many days (today included) to look back at most

    Returns:
        Streak length in days (0 if no activity)

    Example:
        today = 2024-03-10, dates = {03-09, 03-08, 03-07} -> 3
        today = 2024-03-10, dates = {03-09, 03-07}        -> 1
    """
    days = {d.date() if isinstance(d, datetime) else d for d in activity_dates}
    if not days:
        return 0

    streak = 0
    for offset in range(horizon_days):
        day = today - timedelta(days=offset)
        if day in days:
            streak += 1
        elif offset > 0:
            break

    return streak


async def get_activity_streak(
    store,
    user_id: str,
    today: Optional[date] = None,
    horizon_days: int = STREAK_LOOKBACK_DAYS
) -> int:
    """
    Load a user's check-in days from the store and compute the current streak

    Args:
        store: RecordStore to read activity dates from
        user_id: Owning user
        today: Day the streak ends on (defaults to today in STREAK_TIMEZONE)
        horizon_days: Look-back window

    Returns:
        Current streak in days
    """
    if today is None:
        today = local_today()

    since = today - timedelta(days=horizon_days - 1)
    activity_dates = await store.get_activity_dates(
        STREAK_COLLECTION, STREAK_DATE_FIELD, user_id, since=since
    )
    streak = compute_streak(activity_dates, today, horizon_days)

    logger.debug(f"User {user_id} check-in streak: {streak} days (as of {today})")
    return streak


def format_streak_display(streak: int) -> str:
    """Format a streak for chat/CLI display"""
    if streak <= 0:
        return "No active streak yet. Check in today to start one! 💪"
    if streak == 1:
        return "🔥 1 day streak. Come back tomorrow to keep it going!"
    return f"🔥 {streak} day streak"
