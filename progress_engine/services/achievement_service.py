"""
AchievementService - caller-facing achievement API

Wraps the unlock engine and points ledger behind the operations the
application calls: run a check, list the catalog with progress, and read the
user's level and streak. Achievement checking is a best-effort side
activity, so calls without an authenticated user return empty results
instead of raising.
"""

import logging
import time
from typing import Optional

from progress_engine.gamification.achievement_system import UnlockEngine, summarize
from progress_engine.gamification.activity_aggregator import ActivityAggregator
from progress_engine.gamification.catalog import AchievementCatalog
from progress_engine.gamification.points_system import get_level_summary, summarize_level
from progress_engine.gamification.streak_system import get_activity_streak
from progress_engine.models import AchievementView, LevelSummary, NewlyUnlocked
from progress_engine.observability import metrics as prom

logger = logging.getLogger(__name__)


class AchievementService:
    """
    Service for achievements, points and levels.

    Responsibilities:
    - Running achievement checks after user activity
    - Catalog listing with per-user progress
    - Level and points reporting
    """

    def __init__(
        self,
        store,
        catalog: AchievementCatalog,
        aggregator: Optional[ActivityAggregator] = None,
    ):
        """
        Initialize AchievementService.

        Args:
            store: RecordStore instance
            catalog: Loaded achievement catalog
            aggregator: Optional ActivityAggregator (built from store and catalog if omitted)
        """
        self.store = store
        self.catalog = catalog
        self.engine = UnlockEngine(store, catalog, aggregator=aggregator)
        logger.debug(f"AchievementService initialized with {len(catalog)} achievements")

    @classmethod
    async def load(cls, store, **kwargs) -> "AchievementService":
        """Create a service with the catalog read from the store"""
        catalog = await AchievementCatalog.load(store)
        return cls(store, catalog, **kwargs)

    async def run_check(self, user_id: Optional[str]) -> list[NewlyUnlocked]:
        """
        Check for and record newly earned achievements.

        Args:
            user_id: Authenticated user, or None

        Returns:
            Achievements unlocked by this check (empty for anonymous callers)

        Raises:
            PointsLedgerError: if the unlocks were saved but their points were not
        """
        if not user_id:
            prom.achievement_checks_total.labels(status="anonymous").inc()
            return []

        start = time.perf_counter()
        try:
            unlocked = await self.engine.run_check(user_id)
        except Exception:
            prom.achievement_checks_total.labels(status="error").inc()
            raise
        finally:
            prom.achievement_check_duration_seconds.observe(time.perf_counter() - start)

        prom.achievement_checks_total.labels(status="success").inc()
        return [NewlyUnlocked.from_definition(d) for d in unlocked]

    async def get_catalog_with_progress(self, user_id: Optional[str]) -> list[AchievementView]:
        """Every achievement with the user's unlock state and progress"""
        if not user_id:
            return []
        return await self.engine.get_catalog_with_progress(user_id)

    async def get_level_info(self, user_id: Optional[str]) -> LevelSummary:
        """User's points, level, title and progress toward the next level"""
        if not user_id:
            return summarize_level(0)
        return await get_level_summary(self.store, user_id)

    async def get_streak(self, user_id: Optional[str]) -> int:
        """Current check-in streak in days (0 for anonymous callers)"""
        if not user_id:
            return 0
        aggregator = self.engine.aggregator
        return await get_activity_streak(
            self.store,
            user_id,
            today=aggregator.today_provider(),
            horizon_days=aggregator.lookback_days,
        )

    async def get_summary(self, user_id: Optional[str]) -> dict:
        """Unlocked counts overall and per category, plus the closest locked achievements"""
        views = await self.get_catalog_with_progress(user_id)
        return summarize(views)
