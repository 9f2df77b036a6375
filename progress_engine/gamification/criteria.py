"""
Achievement criteria evaluation

Pure functions: given a definition and an AggregatedMetrics snapshot, decide
whether the achievement is earned and how close the user is to earning it.
"""

import math
from typing import Callable

from progress_engine.models import (
    AchievementDefinition,
    AggregatedMetrics,
    CriteriaType,
    EvaluationResult,
)

# Largest progress value strictly below 100; reserved for "not yet unlocked"
_MAX_LOCKED_PROGRESS = math.nextafter(100.0, 0.0)


def _metric_value(definition: AchievementDefinition, metrics: AggregatedMetrics) -> float:
    return metrics.get(definition.criteria_field)


def _streak_value(definition: AchievementDefinition, metrics: AggregatedMetrics) -> float:
    return metrics.streak


# One resolver per criteria type
CRITERIA_RESOLVERS: dict[CriteriaType, Callable[[AchievementDefinition, AggregatedMetrics], float]] = {
    CriteriaType.COUNT: _metric_value,
    CriteriaType.SUM: _metric_value,
    CriteriaType.STREAK: _streak_value,
}


def current_value(definition: AchievementDefinition, metrics: AggregatedMetrics) -> float:
    """Current value of the metric an achievement watches"""
    try:
        resolver = CRITERIA_RESOLVERS[definition.criteria_type]
    except KeyError:
        raise ValueError(f"No resolver for criteria type {definition.criteria_type!r}") from None
    return resolver(definition, metrics)


def calculate_progress(current: float, target: float) -> float:
    """
    Percentage of the way from 0 to target, clamped to [0, 100]

    Only a value that reaches the target yields exactly 100.
    """
    if current >= target:
        return 100.0
    pct = 100.0 * max(current, 0) / target
    return min(pct, _MAX_LOCKED_PROGRESS)


def evaluate(definition: AchievementDefinition, metrics: AggregatedMetrics) -> EvaluationResult:
    """
    Check one achievement against the user's metrics

    Args:
        definition: Catalog entry
        metrics: Aggregated metrics for the user

    Returns:
        EvaluationResult with unlocked flag, progress percentage and current value
    """
    current = current_value(definition, metrics)
    unlocked = current >= definition.criteria_target
    return EvaluationResult(
        unlocked=unlocked,
        progress_pct=calculate_progress(current, definition.criteria_target),
        current=current,
    )
