"""Achievement, unlock and points models"""
from enum import Enum
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class AchievementCategory(str, Enum):
    """Achievement categories"""
    STREAKS = "streaks"
    MILESTONES = "milestones"
    VITALS = "vitals"
    EXERCISE = "exercise"
    NUTRITION = "nutrition"
    MEDICATIONS = "medications"
    GOALS = "goals"
    SYMPTOMS = "symptoms"
    ENGAGEMENT = "engagement"


class CriteriaType(str, Enum):
    """How an achievement's watched metric is accumulated"""
    COUNT = "count"
    SUM = "sum"
    STREAK = "streak"


class AchievementDefinition(BaseModel):
    """Catalog row describing something a user can unlock"""
    model_config = ConfigDict(frozen=True)

    id: str
    code: str
    name: str
    description: str = ""
    category: AchievementCategory
    icon: str = "trophy"
    color: str = "primary"
    criteria_type: CriteriaType
    criteria_field: str
    criteria_target: float = Field(gt=0)
    points: int = Field(gt=0)
    sort_order: int = 0
    is_active: bool = True


class UserAchievementUnlock(BaseModel):
    """A user's unlocked achievement"""
    model_config = ConfigDict(frozen=True)

    user_id: str
    achievement_id: str
    unlocked_at: datetime


class UserPoints(BaseModel):
    """Points ledger row for one user"""
    user_id: str
    total_points: int = Field(default=0, ge=0)
    current_level: int = Field(default=1, ge=1)
    updated_at: Optional[datetime] = None


class NewlyUnlocked(BaseModel):
    """Payload handed back to the caller for each achievement earned in a check"""
    id: str
    name: str
    description: str
    category: AchievementCategory
    icon: str
    color: str
    points: int

    @classmethod
    def from_definition(cls, definition: AchievementDefinition) -> "NewlyUnlocked":
        return cls(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            category=definition.category,
            icon=definition.icon,
            color=definition.color,
            points=definition.points,
        )


class AchievementView(BaseModel):
    """Catalog entry annotated with the user's unlock state and progress"""
    achievement: AchievementDefinition
    is_unlocked: bool
    unlocked_at: Optional[datetime] = None
    current_value: float = 0
    progress_pct: float = Field(ge=0, le=100)
