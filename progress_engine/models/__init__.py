"""Pydantic models for the achievement & progress engine"""
from progress_engine.models.achievement import (
    AchievementCategory,
    AchievementDefinition,
    AchievementView,
    CriteriaType,
    NewlyUnlocked,
    UserAchievementUnlock,
    UserPoints,
)
from progress_engine.models.progress import (
    AggregatedMetrics,
    EvaluationResult,
    LevelInfo,
    LevelSummary,
    LevelThreshold,
)

__all__ = [
    "AchievementCategory",
    "AchievementDefinition",
    "AchievementView",
    "CriteriaType",
    "NewlyUnlocked",
    "UserAchievementUnlock",
    "UserPoints",
    "AggregatedMetrics",
    "EvaluationResult",
    "LevelInfo",
    "LevelSummary",
    "LevelThreshold",
]
