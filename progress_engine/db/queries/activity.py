"""Activity aggregation queries over the tracking tables"""
import logging
from datetime import date
from typing import Any, Optional
from psycopg import sql
from progress_engine.db.connection import db

logger = logging.getLogger(__name__)

# Tables and columns the engine may aggregate over. Names are composed into
# SQL as identifiers, so anything outside this map is refused.
ACTIVITY_COLUMNS: dict[str, set[str]] = {
    "check_ins": {"check_in_date"},
    "vitals": set(),
    "exercise_logs": {"calories_burned"},
    "nutrition_logs": set(),
    "medications": set(),
    "medication_doses": set(),
    "health_goals": {"is_completed"},
    "symptom_logs": set(),
    "ai_conversations": set(),
}


def _check_table(table: str, *columns: str) -> None:
    if table not in ACTIVITY_COLUMNS:
        raise ValueError(f"Unknown activity table: {table}")
    for column in columns:
        if column not in ACTIVITY_COLUMNS[table]:
            raise ValueError(f"Unknown column {column!r} for table {table}")


async def count_user_records(
    table: str,
    user_id: str,
    filters: Optional[dict[str, Any]] = None
) -> int:
    """
    Count a user's lifetime records in an activity table

    Args:
        table: Activity table name (e.g. 'check_ins')
        user_id: Owning user
        filters: Optional equality filters, e.g. {'is_completed': True}

    Returns:
        Number of matching rows
    """
    filters = filters or {}
    _check_table(table, *filters.keys())

    conditions = [sql.SQL("user_id = %s")]
    params: list[Any] = [user_id]
    for column, value in filters.items():
        conditions.append(sql.SQL("{} = %s").format(sql.Identifier(column)))
        params.append(value)

    query = sql.SQL("SELECT COUNT(*) AS total FROM {} WHERE {}").format(
        sql.Identifier(table),
        sql.SQL(" AND ").join(conditions)
    )

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, params)
            row = await cur.fetchone()
            return int(row["total"]) if row else 0


async def sum_user_field(table: str, column: str, user_id: str) -> float:
    """
    Sum a numeric column over a user's records (NULLs count as 0)

    Args:
        table: Activity table name (e.g. 'exercise_logs')
        column: Numeric column to sum (e.g. 'calories_burned')
        user_id: Owning user

    Returns:
        Sum of the column, 0 when the user has no rows
    """
    _check_table(table, column)

    query = sql.SQL("SELECT COALESCE(SUM(COALESCE({col}, 0)), 0) AS total FROM {tbl} WHERE user_id = %s").format(
        col=sql.Identifier(column),
        tbl=sql.Identifier(table)
    )

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, (user_id,))
            row = await cur.fetchone()
            return float(row["total"]) if row and row["total"] is not None else 0.0


async def get_user_activity_dates(
    table: str,
    date_column: str,
    user_id: str,
    since: Optional[date] = None
) -> set[date]:
    """
    Get the distinct calendar dates on which a user logged activity

    Args:
        table: Activity table name
        date_column: DATE column holding the activity day
        user_id: Owning user
        since: Only return dates on or after this day

    Returns:
        Set of distinct dates
    """
    _check_table(table, date_column)

    query = sql.SQL("SELECT DISTINCT {col} AS activity_date FROM {tbl} WHERE user_id = %s").format(
        col=sql.Identifier(date_column),
        tbl=sql.Identifier(table)
    )
    params: list[Any] = [user_id]
    if since is not None:
        query = sql.SQL("{} AND {} >= %s").format(query, sql.Identifier(date_column))
        params.append(since)

    async with db.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, params)
            rows = await cur.fetchall()
            return {row["activity_date"] for row in rows if row["activity_date"] is not None}
