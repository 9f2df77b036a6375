"""Unit tests for streak calculation (progress_engine/gamification/streak_system.py)"""
import pytest
from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

from progress_engine.gamification.streak_system import (
    compute_streak,
    format_streak_display,
    get_activity_streak,
)


def days_ago(today: date, *offsets: int) -> set[date]:
    return {today - timedelta(days=o) for o in offsets}


# ============================================================================
# compute_streak
# ============================================================================

def test_compute_streak_empty(today):
    assert compute_streak(set(), today) == 0


def test_compute_streak_today_missing_does_not_break(today):
    """Yesterday and the two days before count even if today is not logged yet"""
    assert compute_streak(days_ago(today, 1, 2, 3), today) == 3


def test_compute_streak_gap_before_today_breaks(today):
    assert compute_streak(days_ago(today, 1, 3), today) == 1


def test_compute_streak_includes_today(today):
    assert compute_streak(days_ago(today, 0, 1, 2), today) == 3


def test_compute_streak_only_today(today):
    assert compute_streak({today}, today) == 1


def test_compute_streak_gap_at_yesterday(today):
    """Today logged but yesterday missing: streak is just today"""
    assert compute_streak(days_ago(today, 0, 2, 3, 4), today) == 1


def test_compute_streak_both_today_and_yesterday_missing(today):
    assert compute_streak(days_ago(today, 2, 3, 4), today) == 0


def test_compute_streak_ignores_future_dates(today):
    dates = days_ago(today, 1, 2) | {today + timedelta(days=1)}
    assert compute_streak(dates, today) == 2


def test_compute_streak_bounded_by_horizon(today):
    dates = days_ago(today, *range(100))
    assert compute_streak(dates, today) == 60
    assert compute_streak(dates, today, horizon_days=10) == 10


def test_compute_streak_accepts_datetimes_and_duplicates(today):
    dates = [
        datetime.combine(today - timedelta(days=1), datetime.min.time()),
        today - timedelta(days=1),
        today - timedelta(days=2),
    ]
    assert compute_streak(dates, today) == 2


# ============================================================================
# get_activity_streak
# ============================================================================

@pytest.mark.asyncio
async def test_get_activity_streak_reads_check_in_dates(today, test_user_id):
    store = MagicMock()
    store.get_activity_dates = AsyncMock(return_value=days_ago(today, 0, 1, 2, 3))

    streak = await get_activity_streak(store, test_user_id, today=today, horizon_days=60)

    assert streak == 4
    store.get_activity_dates.assert_awaited_once_with(
        "check_ins", "check_in_date", test_user_id, since=today - timedelta(days=59)
    )


# ============================================================================
# Display
# ============================================================================

def test_format_streak_display():
    assert "No active streak" in format_streak_display(0)
    assert "1 day streak" in format_streak_display(1)
    assert "12 day streak" in format_streak_display(12)
