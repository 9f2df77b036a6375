"""Global test fixtures and utilities for progress engine tests"""
import pytest
from datetime import date, datetime, timezone

from progress_engine.gamification.activity_aggregator import ActivityAggregator
from progress_engine.gamification.catalog import AchievementCatalog
from progress_engine.gamification.memory_store import InMemoryRecordStore
from progress_engine.models import AchievementDefinition, AggregatedMetrics
from progress_engine.services.achievement_service import AchievementService


# ============================================================================
# User & Clock Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123"


@pytest.fixture
def today():
    """Fixed 'today' for streak calculations"""
    return date(2024, 3, 10)


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# Catalog Fixtures
# ============================================================================

@pytest.fixture
def achievement_rows():
    """Small catalog: two check-in counts, a streak and a calorie sum"""
    return [
        {
            "id": "ach-first-steps",
            "code": "first_steps",
            "name": "First Steps",
            "description": "Complete your first daily check-in",
            "category": "milestones",
            "icon": "footprints",
            "color": "green",
            "criteria_type": "count",
            "criteria_field": "check_ins",
            "criteria_target": 1,
            "points": 10,
            "sort_order": 1,
        },
        {
            "id": "ach-consistent",
            "code": "consistent",
            "name": "Consistent",
            "description": "Complete 7 daily check-ins",
            "category": "milestones",
            "icon": "calendar-check",
            "color": "blue",
            "criteria_type": "count",
            "criteria_field": "check_ins",
            "criteria_target": 7,
            "points": 25,
            "sort_order": 2,
        },
        {
            "id": "ach-streak-3",
            "code": "streak_3",
            "name": "On a Roll",
            "description": "Check in 3 days in a row",
            "category": "streaks",
            "icon": "flame",
            "color": "orange",
            "criteria_type": "streak",
            "criteria_field": "check_in_streak",
            "criteria_target": 3,
            "points": 15,
            "sort_order": 3,
        },
        {
            "id": "ach-calories-1000",
            "code": "calories_1000",
            "name": "Calorie Crusher",
            "description": "Burn 1,000 calories through exercise",
            "category": "exercise",
            "icon": "zap",
            "color": "orange",
            "criteria_type": "sum",
            "criteria_field": "calories_burned",
            "criteria_target": 1000,
            "points": 50,
            "sort_order": 4,
        },
    ]


@pytest.fixture
def catalog(achievement_rows):
    return AchievementCatalog.from_rows(achievement_rows)


@pytest.fixture
def make_definition():
    """Factory for single AchievementDefinitions"""
    def _make(**overrides) -> AchievementDefinition:
        data = {
            "id": "ach-1",
            "code": "ach_1",
            "name": "Test Achievement",
            "category": "milestones",
            "criteria_type": "count",
            "criteria_field": "check_ins",
            "criteria_target": 10,
            "points": 10,
        }
        data.update(overrides)
        return AchievementDefinition.model_validate(data)
    return _make


@pytest.fixture
def make_metrics():
    def _make(streak: int = 0, **values) -> AggregatedMetrics:
        return AggregatedMetrics(values=values, streak=streak)
    return _make


# ============================================================================
# Store & Service Fixtures
# ============================================================================

@pytest.fixture
def memory_store(achievement_rows):
    """In-memory store seeded with the test catalog"""
    return InMemoryRecordStore(achievements=achievement_rows)


@pytest.fixture
def aggregator(memory_store, catalog, today):
    return ActivityAggregator(memory_store, catalog, today_provider=lambda: today)


@pytest.fixture
def achievement_service(memory_store, catalog, aggregator):
    return AchievementService(memory_store, catalog, aggregator=aggregator)
