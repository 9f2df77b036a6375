"""
Database queries - re-exported so callers can use 'from progress_engine.db import queries'.

Module organization:
- activity.py: counts, sums and activity dates over the tracking tables
- achievements.py: achievement catalog and unlock records
- points.py: points ledger
"""

from progress_engine.db.queries.activity import (
    ACTIVITY_COLUMNS,
    count_user_records,
    sum_user_field,
    get_user_activity_dates,
)

from progress_engine.db.queries.achievements import (
    get_all_achievements,
    get_user_achievement_unlocks,
    insert_user_achievement,
    seed_achievements,
)

from progress_engine.db.queries.points import (
    get_user_points,
    credit_user_points,
)

__all__ = [
    "ACTIVITY_COLUMNS",
    "count_user_records",
    "sum_user_field",
    "get_user_activity_dates",
    "get_all_achievements",
    "get_user_achievement_unlocks",
    "insert_user_achievement",
    "seed_achievements",
    "get_user_points",
    "credit_user_points",
]
