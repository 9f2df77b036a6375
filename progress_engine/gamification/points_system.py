"""
Points and Leveling System

Points are only ever earned by unlocking achievements. The level is derived
from the cumulative total via a fixed threshold table:

Level 1: Health Beginner    (0 pts)
Level 2: Health Starter     (100 pts)
Level 3: Health Enthusiast  (250 pts)
Level 4: Health Dedicated   (500 pts)
Level 5: Health Champion    (1000 pts)
Level 6: Health Master      (2000 pts)
Level 7: Health Legend      (5000 pts)
"""

from typing import Optional, Sequence
import logging

from progress_engine.exceptions import ValidationError
from progress_engine.models import LevelInfo, LevelSummary, LevelThreshold, UserPoints

logger = logging.getLogger(__name__)


LEVEL_THRESHOLDS: tuple[LevelThreshold, ...] = (
    LevelThreshold(level=1, min_points=0, title="Health Beginner"),
    LevelThreshold(level=2, min_points=100, title="Health Starter"),
    LevelThreshold(level=3, min_points=250, title="Health Enthusiast"),
    LevelThreshold(level=4, min_points=500, title="Health Dedicated"),
    LevelThreshold(level=5, min_points=1000, title="Health Champion"),
    LevelThreshold(level=6, min_points=2000, title="Health Master"),
    LevelThreshold(level=7, min_points=5000, title="Health Legend"),
)


def validate_thresholds(thresholds: Sequence[LevelThreshold]) -> None:
    """Level 1 must start at 0 and min_points must strictly increase"""
    if not thresholds or thresholds[0].min_points != 0:
        raise ValueError("Level table must start with a 0-point threshold")
    for prev, cur in zip(thresholds, thresholds[1:]):
        if cur.min_points <= prev.min_points:
            raise ValueError(
                f"Level {cur.level} threshold ({cur.min_points}) must exceed "
                f"level {prev.level} threshold ({prev.min_points})"
            )


validate_thresholds(LEVEL_THRESHOLDS)


def level_for(
    points: int,
    thresholds: Sequence[LevelThreshold] = LEVEL_THRESHOLDS
) -> LevelInfo:
    """
    Calculate level, title and progress toward the next level from a points total

    Returns:
        LevelInfo with level, title, min_points, next_level (None at max level),
        progress_pct (0-100) and the points the info was computed for
    """
    current_index = 0
    for index in range(len(thresholds) - 1, -1, -1):
        if points >= thresholds[index].min_points:
            current_index = index
            break

    current = thresholds[current_index]
    next_level: Optional[LevelThreshold] = (
        thresholds[current_index + 1] if current_index + 1 < len(thresholds) else None
    )

    progress = 100.0
    if next_level:
        points_in_level = points - current.min_points
        points_needed = next_level.min_points - current.min_points
        progress = min(max(100.0 * points_in_level / points_needed, 0.0), 100.0)

    return LevelInfo(
        level=current.level,
        title=current.title,
        min_points=current.min_points,
        next_level=next_level,
        progress_pct=progress,
        points=points,
    )


def resolve_level(points: int) -> int:
    """Level number for a points total"""
    return level_for(points).level


async def add_points(store, user_id: str, delta: int) -> UserPoints:
    """
    Credit points to a user and recompute their level

    Args:
        store: RecordStore holding the points ledger
        user_id: Owning user
        delta: Points to add (must be >= 0)

    Returns:
        Updated UserPoints

    Raises:
        ValidationError: if delta is negative
    """
    if delta < 0:
        raise ValidationError(
            message="Points delta must be non-negative",
            field="delta",
            value=delta,
            user_id=user_id,
            operation="add_points",
        )

    if delta == 0:
        return await store.get_points(user_id)

    updated = await store.credit_points(user_id, delta, resolve_level)
    old_total = updated.total_points - delta
    old_level = resolve_level(old_total)

    logger.info(
        f"Credited {delta} points to user {user_id}. "
        f"Total: {updated.total_points}, Level: {updated.current_level}"
    )
    if updated.current_level > old_level:
        logger.info(f"User {user_id} leveled up from {old_level} to {updated.current_level}!")

    return updated


async def get_level_summary(store, user_id: str) -> LevelSummary:
    """
    Get user's current points and level information

    Returns:
        LevelSummary with level, title, total_points, next_level, progress_pct
    """
    points = await store.get_points(user_id)
    return summarize_level(points.total_points)


def summarize_level(total_points: int) -> LevelSummary:
    info = level_for(total_points)
    return LevelSummary(
        level=info.level,
        title=info.title,
        total_points=total_points,
        next_level=info.next_level,
        progress_pct=info.progress_pct,
        points_to_next_level=info.points_to_next_level,
    )


def format_level_display(summary: LevelSummary) -> str:
    """
    Format level info for chat/CLI display

    Args:
        summary: Output from get_level_summary()

    Returns:
        Formatted string for display
    """
    lines = [
        f"⭐ Level {summary.level}: {summary.title}",
        f"🏅 {summary.total_points} points",
    ]
    if summary.next_level:
        lines.append(
            f"📈 {summary.progress_pct:.0f}% to Level {summary.next_level.level} "
            f"({summary.points_to_next_level} pts to go)"
        )
    else:
        lines.append("🏆 Maximum level reached!")
    return "\n".join(lines)
