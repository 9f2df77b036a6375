"""Service layer for the progress engine"""

from progress_engine.services.achievement_service import AchievementService

__all__ = ["AchievementService"]
