"""Achievement catalog and unlock queries"""
import logging
from datetime import datetime
from typing import Optional
from progress_engine.db.connection import db

logger = logging.getLogger(__name__)


async def get_all_achievements() -> list[dict]:
    """
    Get all active achievement definitions

    Returns:
        List of achievements ordered by sort_order
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT id, code, name, description, category, icon, color,
                       criteria_type, criteria_field, criteria_target, points, sort_order, is_active
                FROM achievements
                WHERE is_active = TRUE
                ORDER BY sort_order, name
                """
            )
            rows = await cur.fetchall()
            return [{**dict(row), "id": str(row["id"])} for row in rows]


async def get_user_achievement_unlocks(user_id: str) -> list[dict]:
    """
    Get user's unlocked achievements

    Args:
        user_id: Owning user

    Returns:
        List of {'user_id', 'achievement_id', 'unlocked_at'} ordered newest first
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT user_id, achievement_id, unlocked_at
                FROM user_achievements
                WHERE user_id = %s
                ORDER BY unlocked_at DESC
                """,
                (user_id,)
            )
            rows = await cur.fetchall()
            return [{**dict(row), "achievement_id": str(row["achievement_id"])} for row in rows]


async def insert_user_achievement(
    user_id: str,
    achievement_id: str,
    unlocked_at: Optional[datetime] = None
) -> bool:
    """
    Record an unlock for a user

    Returns True if unlocked (new), False if already unlocked
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                INSERT INTO user_achievements (user_id, achievement_id, unlocked_at)
                VALUES (%s, %s, COALESCE(%s, CURRENT_TIMESTAMP))
                ON CONFLICT (user_id, achievement_id) DO NOTHING
                RETURNING id
                """,
                (user_id, achievement_id, unlocked_at)
            )

            result = await cur.fetchone()
            await conn.commit()

            return result is not None  # True if inserted, False if already existed


async def seed_achievements(rows: list[dict]) -> int:
    """
    Insert catalog rows that are not in the achievements table yet

    Rows are matched on code; existing rows are left untouched.

    Args:
        rows: Achievement rows including 'id' (UUID string)

    Returns:
        Number of rows inserted
    """
    inserted = 0
    async with db.connection() as conn:
        async with conn.transaction():
            async with conn.cursor() as cur:
                for row in rows:
                    await cur.execute(
                        """
                        INSERT INTO achievements (
                            id, code, name, description, category, icon, color,
                            criteria_type, criteria_field, criteria_target, points, sort_order, is_active
                        )
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                        ON CONFLICT (code) DO NOTHING
                        RETURNING id
                        """,
                        (
                            row["id"], row["code"], row["name"], row["description"], row["category"],
                            row["icon"], row["color"], row["criteria_type"], row["criteria_field"],
                            row["criteria_target"], row["points"], row["sort_order"], row["is_active"],
                        )
                    )
                    if await cur.fetchone() is not None:
                        inserted += 1

    logger.info(f"Seeded {inserted} of {len(rows)} achievements")
    return inserted
