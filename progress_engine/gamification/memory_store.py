"""
In-memory RecordStore

Keeps activity records, unlocks and points in process. Enforces the same
(user_id, achievement_id) uniqueness as the user_achievements table, so it can
stand in for PostgreSQL in tests and local runs. Nothing is persisted.
"""

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from progress_engine.models import UserAchievementUnlock, UserPoints

logger = logging.getLogger(__name__)


class InMemoryRecordStore:
    """In-process record store for activity, unlocks and points"""

    def __init__(self, achievements: Optional[Iterable[dict]] = None):
        self._achievements: list[dict] = [dict(a) for a in achievements or []]
        self._records: dict[str, list[dict]] = defaultdict(list)
        self._unlocks: dict[tuple[str, str], UserAchievementUnlock] = {}
        self._points: dict[str, UserPoints] = {}

    # ------------------------------------------------------------------
    # Seeding helpers
    # ------------------------------------------------------------------

    def add_record(self, collection: str, user_id: str, **fields) -> dict:
        """Add an activity record owned by user_id"""
        record = {"user_id": user_id, **fields}
        self._records[collection].append(record)
        return record

    def add_records(self, collection: str, user_id: str, count: int, **fields) -> None:
        for _ in range(count):
            self.add_record(collection, user_id, **fields)

    # ------------------------------------------------------------------
    # RecordStore operations
    # ------------------------------------------------------------------

    def _user_records(self, collection: str, user_id: str) -> list[dict]:
        return [r for r in self._records.get(collection, []) if r["user_id"] == user_id]

    async def count_records(self, collection, user_id, filters=None):
        await asyncio.sleep(0)
        filters = filters or {}
        return sum(
            1 for r in self._user_records(collection, user_id)
            if all(r.get(k) == v for k, v in filters.items())
        )

    async def sum_field(self, collection, field, user_id):
        await asyncio.sleep(0)
        return float(sum(r.get(field) or 0 for r in self._user_records(collection, user_id)))

    async def get_activity_dates(self, collection, date_field, user_id, since=None):
        await asyncio.sleep(0)
        dates = set()
        for r in self._user_records(collection, user_id):
            value = r.get(date_field)
            if value is None:
                continue
            if isinstance(value, datetime):
                value = value.date()
            if since is None or value >= since:
                dates.add(value)
        return dates

    async def get_achievements(self):
        await asyncio.sleep(0)
        return [dict(a) for a in self._achievements]

    async def seed_achievements(self, definitions):
        await asyncio.sleep(0)
        known = {a.get("code") for a in self._achievements}
        added = [d.model_dump(mode="json") for d in definitions if d.code not in known]
        self._achievements.extend(added)
        return len(added)

    async def get_unlocks(self, user_id):
        await asyncio.sleep(0)
        unlocks = [u for (uid, _), u in self._unlocks.items() if uid == user_id]
        return sorted(unlocks, key=lambda u: u.unlocked_at, reverse=True)

    async def insert_unlock(self, user_id, achievement_id, unlocked_at=None):
        await asyncio.sleep(0)
        key = (user_id, achievement_id)
        # Check-and-set without yielding, like a unique index
        if key in self._unlocks:
            logger.debug(f"Unlock {key} already exists, rejecting insert")
            return False
        self._unlocks[key] = UserAchievementUnlock(
            user_id=user_id,
            achievement_id=achievement_id,
            unlocked_at=unlocked_at or datetime.now(timezone.utc),
        )
        return True

    async def get_points(self, user_id):
        await asyncio.sleep(0)
        if user_id not in self._points:
            self._points[user_id] = UserPoints(user_id=user_id)
            logger.debug(f"Created points record for user {user_id}")
        return self._points[user_id].model_copy()

    async def credit_points(self, user_id: str, delta: int, resolve_level: Callable[[int], int]) -> UserPoints:
        await asyncio.sleep(0)
        current = self._points.get(user_id) or UserPoints(user_id=user_id)
        new_total = current.total_points + delta
        self._points[user_id] = UserPoints(
            user_id=user_id,
            total_points=new_total,
            current_level=resolve_level(new_total),
            updated_at=datetime.now(timezone.utc),
        )
        return self._points[user_id].model_copy()

    # ------------------------------------------------------------------
    # Inspection (tests)
    # ------------------------------------------------------------------

    def unlock_count(self, user_id: str, achievement_id: Optional[str] = None) -> int:
        return sum(
            1 for (uid, aid) in self._unlocks
            if uid == user_id and (achievement_id is None or aid == achievement_id)
        )
