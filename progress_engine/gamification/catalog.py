"""
Achievement Catalog

Read-only table of achievement definitions. The catalog is loaded once
(from the database or the built-in defaults) and handed to the engine; the
engine never writes to it.
"""

from typing import Iterable, Iterator, Optional
from uuid import UUID, uuid5
import logging

from pydantic import ValidationError as PydanticValidationError

from progress_engine.exceptions import ValidationError
from progress_engine.models import AchievementCategory, AchievementDefinition, CriteriaType

logger = logging.getLogger(__name__)

# Namespace for ids of rows that carry only a code. Fixed so the same code
# always maps to the same achievements.id.
CATALOG_NAMESPACE = UUID("6f1c2a4e-8d3b-5e7f-9a0c-1b2d3e4f5a6b")


def achievement_id_for(code: str) -> str:
    """Deterministic UUID string for an achievement code"""
    return str(uuid5(CATALOG_NAMESPACE, code))


# ============================================
# Built-in catalog
# ============================================

DEFAULT_ACHIEVEMENTS: list[dict] = [
    # Milestones
    {"code": "first_steps", "name": "First Steps", "description": "Complete your first daily check-in",
     "category": "milestones", "icon": "footprints", "color": "green",
     "criteria_type": "count", "criteria_field": "check_ins", "criteria_target": 1, "points": 10},
    {"code": "consistent", "name": "Consistent", "description": "Complete 7 daily check-ins",
     "category": "milestones", "icon": "calendar-check", "color": "blue",
     "criteria_type": "count", "criteria_field": "check_ins", "criteria_target": 7, "points": 25},
    {"code": "dedicated", "name": "Dedicated", "description": "Complete 30 daily check-ins",
     "category": "milestones", "icon": "award", "color": "purple",
     "criteria_type": "count", "criteria_field": "check_ins", "criteria_target": 30, "points": 100},
    # Streaks
    {"code": "streak_3", "name": "On a Roll", "description": "Check in 3 days in a row",
     "category": "streaks", "icon": "flame", "color": "orange",
     "criteria_type": "streak", "criteria_field": "check_in_streak", "criteria_target": 3, "points": 15},
    {"code": "streak_7", "name": "Week Warrior", "description": "Check in 7 days in a row",
     "category": "streaks", "icon": "flame", "color": "orange",
     "criteria_type": "streak", "criteria_field": "check_in_streak", "criteria_target": 7, "points": 50},
    {"code": "streak_30", "name": "Monthly Master", "description": "Check in 30 days in a row",
     "category": "streaks", "icon": "crown", "color": "yellow",
     "criteria_type": "streak", "criteria_field": "check_in_streak", "criteria_target": 30, "points": 200},
    # Vitals
    {"code": "first_vitals", "name": "Vital Signs", "description": "Log your first vital reading",
     "category": "vitals", "icon": "heart-pulse", "color": "red",
     "criteria_type": "count", "criteria_field": "vitals", "criteria_target": 1, "points": 10},
    {"code": "vitals_50", "name": "Health Monitor", "description": "Log 50 vital readings",
     "category": "vitals", "icon": "activity", "color": "red",
     "criteria_type": "count", "criteria_field": "vitals", "criteria_target": 50, "points": 75},
    # Exercise
    {"code": "first_workout", "name": "Get Moving", "description": "Log your first workout",
     "category": "exercise", "icon": "dumbbell", "color": "blue",
     "criteria_type": "count", "criteria_field": "exercise_logs", "criteria_target": 1, "points": 10},
    {"code": "workouts_25", "name": "Fitness Fan", "description": "Log 25 workouts",
     "category": "exercise", "icon": "dumbbell", "color": "blue",
     "criteria_type": "count", "criteria_field": "exercise_logs", "criteria_target": 25, "points": 75},
    {"code": "calories_1000", "name": "Calorie Crusher", "description": "Burn 1,000 calories through exercise",
     "category": "exercise", "icon": "zap", "color": "orange",
     "criteria_type": "sum", "criteria_field": "calories_burned", "criteria_target": 1000, "points": 50},
    {"code": "calories_10000", "name": "Inferno", "description": "Burn 10,000 calories through exercise",
     "category": "exercise", "icon": "zap", "color": "red",
     "criteria_type": "sum", "criteria_field": "calories_burned", "criteria_target": 10000, "points": 150},
    # Nutrition
    {"code": "first_meal", "name": "Mindful Eater", "description": "Log your first meal",
     "category": "nutrition", "icon": "apple", "color": "green",
     "criteria_type": "count", "criteria_field": "nutrition_logs", "criteria_target": 1, "points": 10},
    {"code": "meals_100", "name": "Nutrition Pro", "description": "Log 100 meals",
     "category": "nutrition", "icon": "salad", "color": "green",
     "criteria_type": "count", "criteria_field": "nutrition_logs", "criteria_target": 100, "points": 100},
    # Medications
    {"code": "first_medication", "name": "Med Manager", "description": "Add your first medication",
     "category": "medications", "icon": "pill", "color": "pink",
     "criteria_type": "count", "criteria_field": "medications", "criteria_target": 1, "points": 10},
    {"code": "doses_30", "name": "On Schedule", "description": "Record 30 medication doses",
     "category": "medications", "icon": "clock", "color": "pink",
     "criteria_type": "count", "criteria_field": "medication_doses", "criteria_target": 30, "points": 50},
    # Goals
    {"code": "first_goal", "name": "Goal Setter", "description": "Create your first health goal",
     "category": "goals", "icon": "target", "color": "primary",
     "criteria_type": "count", "criteria_field": "health_goals", "criteria_target": 1, "points": 10},
    {"code": "goal_achieved", "name": "Goal Getter", "description": "Complete a health goal",
     "category": "goals", "icon": "trophy", "color": "yellow",
     "criteria_type": "count", "criteria_field": "goals_completed", "criteria_target": 1, "points": 50},
    {"code": "goals_achieved_5", "name": "Overachiever", "description": "Complete 5 health goals",
     "category": "goals", "icon": "medal", "color": "yellow",
     "criteria_type": "count", "criteria_field": "goals_completed", "criteria_target": 5, "points": 150},
    # Symptoms
    {"code": "first_symptom", "name": "Body Aware", "description": "Log your first symptom",
     "category": "symptoms", "icon": "thermometer", "color": "yellow",
     "criteria_type": "count", "criteria_field": "symptom_logs", "criteria_target": 1, "points": 10},
    # Engagement
    {"code": "first_ai_chat", "name": "Curious Mind", "description": "Start your first AI assistant conversation",
     "category": "engagement", "icon": "message-circle", "color": "purple",
     "criteria_type": "count", "criteria_field": "ai_conversations", "criteria_target": 1, "points": 10},
    {"code": "ai_chats_25", "name": "AI Companion", "description": "Have 25 AI assistant conversations",
     "category": "engagement", "icon": "sparkles", "color": "purple",
     "criteria_type": "count", "criteria_field": "ai_conversations", "criteria_target": 25, "points": 50},
]


class AchievementCatalog:
    """Immutable, sort-ordered collection of active achievement definitions"""

    def __init__(self, definitions: Iterable[AchievementDefinition]):
        active = [d for d in definitions if d.is_active]

        by_id: dict[str, AchievementDefinition] = {}
        for definition in active:
            if definition.id in by_id:
                raise ValidationError(
                    message=f"Duplicate achievement id {definition.id}",
                    field="id",
                    value=definition.id,
                )
            by_id[definition.id] = definition

        self._definitions = tuple(sorted(active, key=lambda d: (d.sort_order, d.name)))
        self._by_id = by_id

    def __iter__(self) -> Iterator[AchievementDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, achievement_id: object) -> bool:
        return achievement_id in self._by_id

    @property
    def definitions(self) -> tuple[AchievementDefinition, ...]:
        return self._definitions

    def get(self, achievement_id: str) -> Optional[AchievementDefinition]:
        return self._by_id.get(achievement_id)

    def metric_fields(self) -> set[str]:
        """Distinct criteria fields of count/sum achievements"""
        return {
            d.criteria_field for d in self._definitions
            if d.criteria_type != CriteriaType.STREAK
        }

    def has_streak_criteria(self) -> bool:
        return any(d.criteria_type == CriteriaType.STREAK for d in self._definitions)

    def categories(self) -> list[AchievementCategory]:
        """Categories in catalog order, without duplicates"""
        seen: list[AchievementCategory] = []
        for d in self._definitions:
            if d.category not in seen:
                seen.append(d.category)
        return seen

    def by_category(self, category: AchievementCategory) -> list[AchievementDefinition]:
        return [d for d in self._definitions if d.category == category]

    @classmethod
    def from_rows(cls, rows: Iterable[dict]) -> "AchievementCatalog":
        """
        Build a catalog from raw rows (database rows or DEFAULT_ACHIEVEMENTS entries)

        Rows without an 'id' get achievement_id_for(code). Inactive rows are dropped.

        Raises:
            ValidationError: if a row is malformed (e.g. non-positive target)
        """
        definitions = []
        for index, row in enumerate(rows):
            data = dict(row)
            if not data.get("id") and data.get("code"):
                data["id"] = achievement_id_for(data["code"])
            data.setdefault("sort_order", index)
            try:
                definitions.append(AchievementDefinition.model_validate(data))
            except PydanticValidationError as e:
                raise ValidationError(
                    message=f"Invalid achievement definition {data.get('code')!r}: {e.error_count()} error(s)",
                    field="achievement",
                    value=data.get("code"),
                    cause=e,
                ) from e
        return cls(definitions)

    @classmethod
    def default(cls) -> "AchievementCatalog":
        return cls.from_rows(DEFAULT_ACHIEVEMENTS)

    @classmethod
    async def load(cls, store) -> "AchievementCatalog":
        """Load the catalog from a RecordStore"""
        rows = await store.get_achievements()
        catalog = cls.from_rows(rows)
        logger.info(f"Loaded achievement catalog with {len(catalog)} active achievements")
        return catalog
