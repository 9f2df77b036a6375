"""Leveling and evaluation models"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class LevelThreshold(BaseModel):
    """One row of the static level table"""
    model_config = ConfigDict(frozen=True)

    level: int
    min_points: int
    title: str


class LevelInfo(BaseModel):
    """Level derived from a points total"""
    level: int
    title: str
    min_points: int
    next_level: Optional[LevelThreshold] = None
    progress_pct: float = Field(ge=0, le=100)
    points: int = 0

    @property
    def points_to_next_level(self) -> Optional[int]:
        if self.next_level is None:
            return None
        return max(0, self.next_level.min_points - self.points)


class LevelSummary(BaseModel):
    """Level info as returned to callers"""
    level: int
    title: str
    total_points: int
    next_level: Optional[LevelThreshold] = None
    progress_pct: float = Field(ge=0, le=100)
    points_to_next_level: Optional[int] = None


class AggregatedMetrics(BaseModel):
    """Per-evaluation snapshot of a user's activity metrics"""
    values: dict[str, float] = Field(default_factory=dict)
    streak: int = 0
    degraded_fields: set[str] = Field(default_factory=set)

    def get(self, field: str) -> float:
        return self.values.get(field, 0)

    @property
    def is_degraded(self) -> bool:
        return bool(self.degraded_fields)


class EvaluationResult(BaseModel):
    """Outcome of checking one achievement against aggregated metrics"""
    model_config = ConfigDict(frozen=True)

    unlocked: bool
    progress_pct: float = Field(ge=0, le=100)
    current: float = 0
