"""Unit tests for criteria evaluation (progress_engine/gamification/criteria.py)"""
import pytest

from progress_engine.gamification.criteria import (
    CRITERIA_RESOLVERS,
    calculate_progress,
    current_value,
    evaluate,
)
from progress_engine.models import CriteriaType


def test_every_criteria_type_has_a_resolver():
    assert set(CRITERIA_RESOLVERS) == set(CriteriaType)


def test_count_criteria_unlocked_at_target(make_definition, make_metrics):
    definition = make_definition(criteria_target=5)
    result = evaluate(definition, make_metrics(check_ins=5))

    assert result.unlocked is True
    assert result.progress_pct == 100
    assert result.current == 5


def test_count_criteria_partial_progress(make_definition, make_metrics):
    definition = make_definition(criteria_target=7)
    result = evaluate(definition, make_metrics(check_ins=5))

    assert result.unlocked is False
    assert result.progress_pct == pytest.approx(100 * 5 / 7)


def test_sum_criteria_uses_field_value(make_definition, make_metrics):
    definition = make_definition(criteria_type="sum", criteria_field="calories_burned", criteria_target=1000)

    assert evaluate(definition, make_metrics(calories_burned=250.5)).progress_pct == pytest.approx(25.05)
    assert evaluate(definition, make_metrics(calories_burned=1200)).unlocked is True


def test_streak_criteria_uses_streak_not_field(make_definition, make_metrics):
    definition = make_definition(criteria_type="streak", criteria_field="check_in_streak", criteria_target=3)

    assert evaluate(definition, make_metrics(streak=3)).unlocked is True
    assert evaluate(definition, make_metrics(streak=2, check_in_streak=10)).unlocked is False


def test_missing_field_counts_as_zero(make_definition, make_metrics):
    definition = make_definition(criteria_field="vitals")
    result = evaluate(definition, make_metrics(check_ins=100))

    assert result.unlocked is False
    assert result.progress_pct == 0
    assert current_value(definition, make_metrics()) == 0


def test_evaluate_is_pure(make_definition, make_metrics):
    definition = make_definition(criteria_target=4)
    metrics = make_metrics(check_ins=3)
    assert evaluate(definition, metrics) == evaluate(definition, metrics)


@pytest.mark.parametrize("current,target", [
    (0, 1), (0.5, 1), (99, 100), (100, 100), (150, 100),
    (-5, 10), (0.999999999999, 1), (3, 7), (1e9, 1),
])
def test_progress_bounds(current, target):
    """0 <= progress <= 100 and progress == 100 exactly when target is reached"""
    pct = calculate_progress(current, target)

    assert 0 <= pct <= 100
    assert (pct == 100) == (current >= target)
