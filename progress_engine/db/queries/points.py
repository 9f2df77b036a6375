"""Points ledger queries"""
import logging
from typing import Callable
from progress_engine.db.connection import db

logger = logging.getLogger(__name__)


async def get_user_points(user_id: str) -> dict:
    """
    Get user points row (creates if doesn't exist)

    Returns:
        {
            'user_id': str,
            'total_points': int,
            'current_level': int,
            'updated_at': datetime
        }
    """
    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(
                """
                SELECT user_id, total_points, current_level, updated_at
                FROM user_points
                WHERE user_id = %s
                """,
                (user_id,)
            )
            row = await cur.fetchone()

            if not row:
                await cur.execute(
                    """
                    INSERT INTO user_points (user_id, total_points, current_level)
                    VALUES (%s, 0, 1)
                    ON CONFLICT (user_id) DO UPDATE SET user_id = EXCLUDED.user_id
                    RETURNING user_id, total_points, current_level, updated_at
                    """,
                    (user_id,)
                )
                row = await cur.fetchone()
                await conn.commit()
                logger.info(f"Created points record for user {user_id}")

            return dict(row)


async def credit_user_points(
    user_id: str,
    delta: int,
    resolve_level: Callable[[int], int]
) -> dict:
    """
    Add points to a user's total and store the level derived from the new total

    Read, level derivation and write happen inside one transaction holding a
    row lock, so concurrent credits for the same user serialize.

    Args:
        user_id: Owning user
        delta: Non-negative number of points to add
        resolve_level: Maps a points total to a level number

    Returns:
        Updated points row
    """
    async with db.connection() as conn:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO user_points (user_id, total_points, current_level)
                    VALUES (%s, 0, 1)
                    ON CONFLICT (user_id) DO NOTHING
                    """,
                    (user_id,)
                )
                await cur.execute(
                    "SELECT total_points FROM user_points WHERE user_id = %s FOR UPDATE",
                    (user_id,)
                )
                row = await cur.fetchone()
                new_total = (row["total_points"] if row else 0) + delta

                await cur.execute(
                    """
                    UPDATE user_points
                    SET total_points = %s,
                        current_level = %s,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE user_id = %s
                    RETURNING user_id, total_points, current_level, updated_at
                    """,
                    (new_total, resolve_level(new_total), user_id)
                )
                return dict(await cur.fetchone())
