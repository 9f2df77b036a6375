"""Unit tests for Points and Leveling System (progress_engine/gamification/points_system.py)"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from progress_engine.exceptions import ValidationError
from progress_engine.gamification.memory_store import InMemoryRecordStore
from progress_engine.gamification.points_system import (
    LEVEL_THRESHOLDS,
    add_points,
    format_level_display,
    get_level_summary,
    level_for,
    resolve_level,
    summarize_level,
    validate_thresholds,
)
from progress_engine.models import LevelThreshold, UserPoints


# ============================================================================
# Level Calculation Tests
# ============================================================================

def test_level_for_zero_points():
    info = level_for(0)

    assert info.level == 1
    assert info.title == "Health Beginner"
    assert info.next_level.min_points == 100
    assert info.progress_pct == 0


def test_level_for_just_below_threshold():
    info = level_for(249)

    assert info.level == 2
    assert info.title == "Health Starter"
    assert info.next_level.min_points == 250
    assert info.progress_pct < 100
    assert info.progress_pct == pytest.approx(100 * 149 / 150)


def test_level_for_exact_threshold():
    info = level_for(250)

    assert info.level == 3
    assert info.title == "Health Enthusiast"
    assert info.next_level.min_points == 500
    assert info.progress_pct == 0


def test_level_for_max_level():
    info = level_for(5000)

    assert info.level == 7
    assert info.title == "Health Legend"
    assert info.next_level is None
    assert info.progress_pct == 100
    assert info.points_to_next_level is None

    assert level_for(1_000_000).level == 7


def test_level_for_negative_points():
    """Negative totals never happen, but should clamp to level 1"""
    info = level_for(-100)
    assert info.level == 1
    assert info.progress_pct == 0


def test_level_for_each_threshold():
    for threshold in LEVEL_THRESHOLDS:
        assert level_for(threshold.min_points).level == threshold.level
        if threshold.min_points > 0:
            assert level_for(threshold.min_points - 1).level == threshold.level - 1


def test_points_to_next_level():
    assert level_for(140).points_to_next_level == 110


def test_resolve_level():
    assert resolve_level(999) == 4
    assert resolve_level(1000) == 5


def test_validate_thresholds_rejects_bad_tables():
    with pytest.raises(ValueError):
        validate_thresholds([LevelThreshold(level=1, min_points=10, title="x")])
    with pytest.raises(ValueError):
        validate_thresholds([
            LevelThreshold(level=1, min_points=0, title="a"),
            LevelThreshold(level=2, min_points=0, title="b"),
        ])


# ============================================================================
# Points Ledger Tests
# ============================================================================

@pytest.mark.asyncio
async def test_add_points_creates_row_and_sets_level(test_user_id):
    store = InMemoryRecordStore()

    points = await add_points(store, test_user_id, 120)

    assert points.total_points == 120
    assert points.current_level == 2


@pytest.mark.asyncio
async def test_add_points_is_monotonic_and_sums_deltas(test_user_id):
    store = InMemoryRecordStore()
    deltas = [10, 0, 25, 90, 0, 300, 5]

    totals = []
    for delta in deltas:
        totals.append((await add_points(store, test_user_id, delta)).total_points)

    assert totals == sorted(totals)
    assert totals[-1] == sum(deltas)
    assert (await store.get_points(test_user_id)).current_level == level_for(sum(deltas)).level


@pytest.mark.asyncio
async def test_add_points_rejects_negative_delta(test_user_id):
    store = MagicMock()
    store.credit_points = AsyncMock()

    with pytest.raises(ValidationError):
        await add_points(store, test_user_id, -5)

    store.credit_points.assert_not_called()


@pytest.mark.asyncio
async def test_add_points_zero_delta_does_not_write(test_user_id):
    store = MagicMock()
    store.get_points = AsyncMock(return_value=UserPoints(user_id=test_user_id, total_points=40))
    store.credit_points = AsyncMock()

    points = await add_points(store, test_user_id, 0)

    assert points.total_points == 40
    store.credit_points.assert_not_called()


@pytest.mark.asyncio
async def test_add_points_passes_level_resolver(test_user_id):
    store = MagicMock()
    store.credit_points = AsyncMock(
        return_value=UserPoints(user_id=test_user_id, total_points=260, current_level=3)
    )

    await add_points(store, test_user_id, 20)

    store.credit_points.assert_awaited_once_with(test_user_id, 20, resolve_level)


@pytest.mark.asyncio
async def test_get_level_summary(test_user_id):
    store = MagicMock()
    store.get_points = AsyncMock(return_value=UserPoints(user_id=test_user_id, total_points=600, current_level=4))

    summary = await get_level_summary(store, test_user_id)

    assert summary.level == 4
    assert summary.title == "Health Dedicated"
    assert summary.total_points == 600
    assert summary.next_level.level == 5
    assert summary.points_to_next_level == 400
    assert summary.progress_pct == pytest.approx(20.0)


def test_format_level_display():
    text = format_level_display(summarize_level(140))
    assert "Level 2: Health Starter" in text
    assert "110 pts to go" in text

    assert "Maximum level" in format_level_display(summarize_level(9000))
