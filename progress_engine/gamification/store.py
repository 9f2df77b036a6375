"""
Record store interface used by the achievement engine

The engine only needs a handful of per-user operations. PostgresRecordStore
implements them over progress_engine.db.queries; InMemoryRecordStore
(memory_store.py) implements the same contract in process.
"""

from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional, Protocol
import logging

import psycopg

from progress_engine.db import queries
from progress_engine.exceptions import wrap_external_exception
from progress_engine.models import AchievementDefinition, UserAchievementUnlock, UserPoints

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Per-user scoped operations the engine requires"""

    async def count_records(
        self, collection: str, user_id: str, filters: Optional[dict[str, Any]] = None
    ) -> int: ...

    async def sum_field(self, collection: str, field: str, user_id: str) -> float: ...

    async def get_activity_dates(
        self, collection: str, date_field: str, user_id: str, since: Optional[date] = None
    ) -> set[date]: ...

    async def get_achievements(self) -> list[dict]: ...

    async def seed_achievements(self, definitions: Iterable[AchievementDefinition]) -> int:
        """Add definitions whose code is not stored yet; returns how many were added"""
        ...

    async def get_unlocks(self, user_id: str) -> list[UserAchievementUnlock]: ...

    async def insert_unlock(self, user_id: str, achievement_id: str, unlocked_at: datetime) -> bool:
        """Insert-or-reject: True if created, False if (user, achievement) already exists"""
        ...

    async def get_points(self, user_id: str) -> UserPoints:
        """Points row for the user, created with zero points if missing"""
        ...

    async def credit_points(
        self, user_id: str, delta: int, resolve_level: Callable[[int], int]
    ) -> UserPoints:
        """Atomically add delta and store the level derived from the new total"""
        ...


class PostgresRecordStore:
    """RecordStore backed by the PostgreSQL queries module"""

    async def _run(self, operation: str, user_id: Optional[str], coro):
        try:
            return await coro
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation=operation, user_id=user_id) from e

    async def count_records(self, collection, user_id, filters=None):
        return await self._run(
            "count_records", user_id, queries.count_user_records(collection, user_id, filters)
        )

    async def sum_field(self, collection, field, user_id):
        return await self._run(
            "sum_field", user_id, queries.sum_user_field(collection, field, user_id)
        )

    async def get_activity_dates(self, collection, date_field, user_id, since=None):
        return await self._run(
            "get_activity_dates", user_id,
            queries.get_user_activity_dates(collection, date_field, user_id, since)
        )

    async def get_achievements(self):
        return await self._run("get_achievements", None, queries.get_all_achievements())

    async def seed_achievements(self, definitions):
        rows = [d.model_dump(mode="json") for d in definitions]
        return await self._run("seed_achievements", None, queries.seed_achievements(rows))

    async def get_unlocks(self, user_id):
        rows = await self._run("get_unlocks", user_id, queries.get_user_achievement_unlocks(user_id))
        return [UserAchievementUnlock.model_validate(row) for row in rows]

    async def insert_unlock(self, user_id, achievement_id, unlocked_at):
        return await self._run(
            "insert_unlock", user_id,
            queries.insert_user_achievement(user_id, achievement_id, unlocked_at)
        )

    async def get_points(self, user_id):
        row = await self._run("get_points", user_id, queries.get_user_points(user_id))
        return UserPoints.model_validate(row)

    async def credit_points(self, user_id, delta, resolve_level):
        row = await self._run(
            "credit_points", user_id, queries.credit_user_points(user_id, delta, resolve_level)
        )
        return UserPoints.model_validate(row)
