"""
Achievement System

Evaluates a user's activity against the achievement catalog, records each
unlock at most once, and credits the points of newly unlocked achievements.

Concurrent checks for the same user are expected (checks are triggered after
almost every write). Exactly-once unlocking relies on the store rejecting a
second (user_id, achievement_id) insert; a rejected insert simply means the
achievement was not newly unlocked by this check.
"""

from typing import Callable, Optional
from datetime import datetime, timezone
import logging

from progress_engine.exceptions import PointsLedgerError
from progress_engine.gamification.activity_aggregator import ActivityAggregator
from progress_engine.gamification.catalog import AchievementCatalog
from progress_engine.gamification.criteria import evaluate
from progress_engine.gamification.points_system import add_points
from progress_engine.models import (
    AchievementCategory,
    AchievementDefinition,
    AchievementView,
)
from progress_engine.observability import metrics as prom

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UnlockEngine:
    """Runs achievement checks for users against one catalog"""

    def __init__(
        self,
        store,
        catalog: AchievementCatalog,
        aggregator: Optional[ActivityAggregator] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.catalog = catalog
        self.aggregator = aggregator or ActivityAggregator(store, catalog)
        self.clock = clock

    async def run_check(self, user_id: str) -> list[AchievementDefinition]:
        """
        Check if user unlocked any achievements and credit their points

        Args:
            user_id: Owning user

        Returns:
            Definitions unlocked by this check, in catalog order. Achievements
            another concurrent check unlocked first are not included.

        Raises:
            PointsLedgerError: unlocks were recorded but crediting their points failed
        """
        unlocks = await self.store.get_unlocks(user_id)
        unlocked_ids = {u.achievement_id for u in unlocks}

        candidates = [d for d in self.catalog if d.id not in unlocked_ids]
        if not candidates:
            return []

        metrics = await self.aggregator.aggregate(user_id)

        newly_unlocked: list[AchievementDefinition] = []
        points_earned = 0

        for definition in candidates:
            result = evaluate(definition, metrics)
            if not result.unlocked:
                continue

            try:
                created = await self.store.insert_unlock(user_id, definition.id, self.clock())
            except Exception as e:
                logger.error(
                    f"Failed to record unlock of {definition.code} for user {user_id}: {e}",
                    exc_info=True
                )
                prom.achievement_unlock_failures_total.inc()
                continue

            if not created:
                logger.debug(f"User {user_id} already has achievement {definition.code}, skipping")
                prom.achievement_duplicate_unlocks_total.inc()
                continue

            newly_unlocked.append(definition)
            points_earned += definition.points
            prom.achievements_unlocked_total.labels(category=definition.category.value).inc()

            logger.info(
                f"User {user_id} unlocked achievement: {definition.code} "
                f"({definition.name}) +{definition.points} pts"
            )

        if points_earned:
            try:
                await add_points(self.store, user_id, points_earned)
            except Exception as e:
                raise PointsLedgerError(
                    message=f"Failed to credit {points_earned} points for {len(newly_unlocked)} new achievement(s)",
                    delta=points_earned,
                    achievement_ids=[d.id for d in newly_unlocked],
                    user_id=user_id,
                    operation="run_check",
                    cause=e,
                ) from e
            prom.achievement_points_awarded_total.inc(points_earned)

        if metrics.is_degraded:
            logger.warning(
                f"Achievement check for user {user_id} ran with degraded metrics: "
                f"{sorted(metrics.degraded_fields)}"
            )

        return newly_unlocked

    async def get_catalog_with_progress(self, user_id: str) -> list[AchievementView]:
        """
        Get every catalog achievement with the user's unlock state and progress

        Returns:
            AchievementViews in catalog order; unlocked entries report 100% progress
        """
        unlocks = await self.store.get_unlocks(user_id)
        unlocked_at = {u.achievement_id: u.unlocked_at for u in unlocks}
        metrics = await self.aggregator.aggregate(user_id)

        views = []
        for definition in self.catalog:
            result = evaluate(definition, metrics)
            is_unlocked = definition.id in unlocked_at
            views.append(AchievementView(
                achievement=definition,
                is_unlocked=is_unlocked,
                unlocked_at=unlocked_at.get(definition.id),
                current_value=result.current,
                progress_pct=100.0 if is_unlocked else result.progress_pct,
            ))
        return views


# ============================================
# Display helpers
# ============================================

def filter_by_category(
    views: list[AchievementView],
    category: Optional[AchievementCategory] = None
) -> list[AchievementView]:
    """Views in one category (all views when category is None)"""
    if category is None:
        return list(views)
    return [v for v in views if v.achievement.category == category]


def summarize(views: list[AchievementView]) -> dict:
    """
    Summarize a user's achievement progress

    Returns:
        {
            'total_unlocked': int,
            'total_achievements': int,
            'unlocked_pct': float,
            'points_from_achievements': int,
            'by_category': {category: {'unlocked': int, 'total': int}},
            'closest': [views closest to completion, most progress first]
        }
    """
    unlocked = [v for v in views if v.is_unlocked]
    by_category: dict[str, dict[str, int]] = {}
    for view in views:
        bucket = by_category.setdefault(view.achievement.category.value, {"unlocked": 0, "total": 0})
        bucket["total"] += 1
        if view.is_unlocked:
            bucket["unlocked"] += 1

    locked = sorted(
        (v for v in views if not v.is_unlocked),
        key=lambda v: v.progress_pct,
        reverse=True,
    )

    return {
        "total_unlocked": len(unlocked),
        "total_achievements": len(views),
        "unlocked_pct": 100.0 * len(unlocked) / len(views) if views else 0.0,
        "points_from_achievements": sum(v.achievement.points for v in unlocked),
        "by_category": by_category,
        "closest": locked[:3],
    }


def format_unlock_message(achievement: AchievementDefinition) -> str:
    """
    Format achievement unlock message for celebration

    Args:
        achievement: Definition returned by run_check()

    Returns:
        Formatted celebration message
    """
    return f"""🎉 ACHIEVEMENT UNLOCKED! 🎉

🏆 {achievement.name}

{achievement.description}

⭐ +{achievement.points} points!

Keep up the amazing work! 💪"""


def format_achievement_display(views: list[AchievementView]) -> str:
    """Format the catalog with progress for chat/CLI display"""
    if not views:
        return "🏆 No achievements available yet."

    summary = summarize(views)
    lines = [
        f"🏆 YOUR ACHIEVEMENTS ({summary['total_unlocked']}/{summary['total_achievements']})",
        f"⭐ Points from achievements: {summary['points_from_achievements']}\n",
    ]

    for category in dict.fromkeys(v.achievement.category for v in views):
        lines.append(category.value.upper())
        for view in filter_by_category(views, category):
            a = view.achievement
            if view.is_unlocked:
                lines.append(f"  ✅ {a.name} (+{a.points})")
            else:
                lines.append(f"  🔒 {a.name} {view.progress_pct:.0f}%")
        lines.append("")

    return "\n".join(lines).rstrip()
