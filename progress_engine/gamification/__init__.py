"""
Achievement & progress engine

This package implements:
- Achievement catalog (read-only definitions)
- Activity aggregation and day streaks
- Criteria evaluation and progress
- Exactly-once unlocking with points crediting
- Points ledger and leveling
"""

from progress_engine.gamification.catalog import AchievementCatalog, DEFAULT_ACHIEVEMENTS
from progress_engine.gamification.streak_system import compute_streak, get_activity_streak
from progress_engine.gamification.criteria import evaluate, calculate_progress
from progress_engine.gamification.activity_aggregator import ActivityAggregator, METRIC_SOURCES, MetricSource
from progress_engine.gamification.points_system import LEVEL_THRESHOLDS, add_points, level_for, get_level_summary
from progress_engine.gamification.achievement_system import UnlockEngine
from progress_engine.gamification.store import PostgresRecordStore, RecordStore
from progress_engine.gamification.memory_store import InMemoryRecordStore

__all__ = [
    "AchievementCatalog",
    "DEFAULT_ACHIEVEMENTS",
    "compute_streak",
    "get_activity_streak",
    "evaluate",
    "calculate_progress",
    "ActivityAggregator",
    "METRIC_SOURCES",
    "MetricSource",
    "LEVEL_THRESHOLDS",
    "add_points",
    "level_for",
    "get_level_summary",
    "UnlockEngine",
    "PostgresRecordStore",
    "RecordStore",
    "InMemoryRecordStore",
]
