"""Command line entry point for the progress engine"""
import argparse
import asyncio
import json
import logging
import sys

from pydantic import TypeAdapter

from progress_engine.config import validate_config, LOG_LEVEL
from progress_engine.db.connection import db
from progress_engine.exceptions import ProgressEngineError
from progress_engine.gamification.achievement_system import (
    format_achievement_display,
    format_unlock_message,
)
from progress_engine.gamification.catalog import AchievementCatalog
from progress_engine.gamification.points_system import format_level_display
from progress_engine.gamification.store import PostgresRecordStore
from progress_engine.gamification.streak_system import format_streak_display
from progress_engine.models import AchievementView, NewlyUnlocked
from progress_engine.services.achievement_service import AchievementService

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)

_unlocked_list = TypeAdapter(list[NewlyUnlocked])
_view_list = TypeAdapter(list[AchievementView])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="progress-engine",
        description="Run achievement checks and inspect user progress"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Evaluate and unlock achievements for a user")
    check.add_argument("user_id")

    catalog = subparsers.add_parser("catalog", help="Show achievements with the user's progress")
    catalog.add_argument("user_id")

    level = subparsers.add_parser("level", help="Show the user's points and level")
    level.add_argument("user_id")

    streak = subparsers.add_parser("streak", help="Show the user's current check-in streak")
    streak.add_argument("user_id")

    subparsers.add_parser("seed", help="Insert the built-in achievement catalog into the database")

    for sub in (check, catalog, level, streak):
        sub.add_argument("--json", action="store_true", help="Print JSON instead of text")

    return parser


async def run_command(args: argparse.Namespace, service: AchievementService) -> str:
    """Execute one CLI command and return its output"""
    if args.command == "check":
        unlocked = await service.run_check(args.user_id)
        if args.json:
            return _unlocked_list.dump_json(unlocked).decode()
        if not unlocked:
            return "No new achievements."
        return "\n\n".join(format_unlock_message(service.catalog.get(u.id)) for u in unlocked)

    if args.command == "catalog":
        views = await service.get_catalog_with_progress(args.user_id)
        if args.json:
            return _view_list.dump_json(views).decode()
        return format_achievement_display(views)

    if args.command == "streak":
        streak = await service.get_streak(args.user_id)
        if args.json:
            return json.dumps({"user_id": args.user_id, "streak": streak})
        return format_streak_display(streak)

    summary = await service.get_level_info(args.user_id)
    if args.json:
        return summary.model_dump_json()
    return format_level_display(summary)


async def seed_catalog(store) -> str:
    """Store the built-in catalog rows that the database does not have yet"""
    catalog = AchievementCatalog.default()
    inserted = await store.seed_achievements(catalog.definitions)
    return f"Seeded {inserted} of {len(catalog)} achievements."


async def main(argv=None) -> int:
    """Main application entry point"""
    args = build_parser().parse_args(argv)
    try:
        validate_config()

        logger.info("Initializing database connection pool...")
        await db.init_pool()

        store = PostgresRecordStore()
        if args.command == "seed":
            print(await seed_catalog(store))
        else:
            service = await AchievementService.load(store)
            print(await run_command(args, service))
        return 0

    except ProgressEngineError as e:
        print(e.user_message, file=sys.stderr)
        return 1
    finally:
        await db.close_pool()


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
