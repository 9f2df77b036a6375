"""
Activity Aggregation

Computes, for one user, the current value of every metric the achievement
catalog watches plus the current check-in streak. All queries run
concurrently. A query that fails degrades its metric to 0 instead of failing
the whole evaluation.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Optional
import asyncio
import logging

from progress_engine.config import STREAK_LOOKBACK_DAYS
from progress_engine.gamification.catalog import AchievementCatalog
from progress_engine.gamification.streak_system import get_activity_streak, local_today
from progress_engine.models import AggregatedMetrics, CriteriaType
from progress_engine.observability import metrics as prom

logger = logging.getLogger(__name__)

STREAK_METRIC = "__streak__"


@dataclass(frozen=True)
class MetricSource:
    """Where a criteria field's value comes from"""
    kind: CriteriaType
    collection: str
    attribute: Optional[str] = None
    filters: dict[str, Any] = field(default_factory=dict)


METRIC_SOURCES: dict[str, MetricSource] = {
    "check_ins": MetricSource(CriteriaType.COUNT, "check_ins"),
    "vitals": MetricSource(CriteriaType.COUNT, "vitals"),
    "exercise_logs": MetricSource(CriteriaType.COUNT, "exercise_logs"),
    "nutrition_logs": MetricSource(CriteriaType.COUNT, "nutrition_logs"),
    "medications": MetricSource(CriteriaType.COUNT, "medications"),
    "medication_doses": MetricSource(CriteriaType.COUNT, "medication_doses"),
    "health_goals": MetricSource(CriteriaType.COUNT, "health_goals"),
    "goals_completed": MetricSource(CriteriaType.COUNT, "health_goals", filters={"is_completed": True}),
    "symptom_logs": MetricSource(CriteriaType.COUNT, "symptom_logs"),
    "ai_conversations": MetricSource(CriteriaType.COUNT, "ai_conversations"),
    "calories_burned": MetricSource(CriteriaType.SUM, "exercise_logs", attribute="calories_burned"),
}


class ActivityAggregator:
    """Builds AggregatedMetrics for a user from a RecordStore"""

    def __init__(
        self,
        store,
        catalog: AchievementCatalog,
        sources: Optional[dict[str, MetricSource]] = None,
        lookback_days: int = STREAK_LOOKBACK_DAYS,
        today_provider: Callable[[], date] = local_today,
    ):
        self.store = store
        self.catalog = catalog
        self.sources = METRIC_SOURCES if sources is None else sources
        self.lookback_days = lookback_days
        self.today_provider = today_provider

    async def aggregate(self, user_id: str, today: Optional[date] = None) -> AggregatedMetrics:
        """
        Compute every metric referenced by the catalog for one user

        Args:
            user_id: Owning user
            today: Day streaks end on (defaults to today_provider())

        Returns:
            AggregatedMetrics; degraded_fields lists metrics whose query failed
        """
        if today is None:
            today = self.today_provider()

        fields = sorted(self.catalog.metric_fields())
        tasks = {f: self._metric_value(f, user_id) for f in fields}
        if self.catalog.has_streak_criteria():
            tasks[STREAK_METRIC] = get_activity_streak(
                self.store, user_id, today=today, horizon_days=self.lookback_days
            )

        names = list(tasks)
        results = await asyncio.gather(*tasks.values(), return_exceptions=True)

        aggregated = AggregatedMetrics()
        for name, result in zip(names, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                logger.warning(
                    f"Degraded achievement evaluation for user {user_id}: "
                    f"metric '{name}' failed ({result!r}), using 0"
                )
                prom.achievement_metric_degraded_total.labels(field=name).inc()
                aggregated.degraded_fields.add(name)
                result = 0

            if name == STREAK_METRIC:
                aggregated.streak = int(result)
            else:
                aggregated.values[name] = result

        return aggregated

    async def _metric_value(self, field_name: str, user_id: str) -> float:
        source = self.sources.get(field_name)
        if source is None:
            logger.warning(f"No metric source for criteria field '{field_name}', treating as 0")
            return 0

        if source.kind == CriteriaType.SUM:
            return await self.store.sum_field(source.collection, source.attribute, user_id)
        return await self.store.count_records(source.collection, user_id, source.filters or None)
