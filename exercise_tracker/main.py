#!/usr/bin/env python3
"""
Exercise Tracker - command line entry point

Runs the exercise log operations against the configured database and
prints each result as JSON on stdout. Logs go to stderr.

    exercise-tracker new-user alice
    exercise-tracker add <user-id> run 30 --date 2020-01-01
    exercise-tracker log --user-id <user-id> --from 2020-01-15 --limit 5
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from exercise_tracker.config import Config
from exercise_tracker.core.errors import ExerciseTrackerError
from exercise_tracker.logging_config import configure_logging
from exercise_tracker.adapters.database.manager import DatabaseManager
from exercise_tracker.service import ExerciseTrackerService


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(description="Exercise Tracker")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the database tables")

    new_user = subparsers.add_parser("new-user", help="Register a username")
    new_user.add_argument("username")

    subparsers.add_parser("users", help="List all users")

    add = subparsers.add_parser("add", help="Add an exercise to a user's log")
    add.add_argument("user_id")
    add.add_argument("description")
    add.add_argument("duration", type=int)
    add.add_argument("--date", default=None, help="yyyy-mm-dd, defaults to today")

    log = subparsers.add_parser("log", help="Show a user's exercise log")
    log.add_argument("--user-id", dest="user_id", default=None)
    log.add_argument("--from", dest="from_date", default=None, help="yyyy-mm-dd, exclusive")
    log.add_argument("--to", dest="to_date", default=None, help="yyyy-mm-dd, exclusive")
    log.add_argument("--limit", default=None, help="maximum number of entries")

    return parser


async def execute(service: ExerciseTrackerService, args: argparse.Namespace) -> Dict[str, Any]:
    """Run one command against a started service and return its JSON body."""
    exercise_log = service.exercise_log

    if args.command == "new-user":
        result = await exercise_log.create_user(args.username)
        return result.to_dict()

    if args.command == "users":
        users = await exercise_log.list_users()
        return {"users": [user.to_dict() for user in users]}

    if args.command == "add":
        user = await exercise_log.add_exercise(
            args.user_id, args.description, args.duration, args.date
        )
        return user.to_dict()

    if args.command == "log":
        result = await exercise_log.get_log(
            args.user_id, from_=args.from_date, to=args.to_date, limit=args.limit
        )
        return result.to_dict()

    raise ValueError(f"Unknown command: {args.command}")


async def init_db(config: Config) -> Dict[str, Any]:
    """Create the schema directly, without alembic."""
    manager = DatabaseManager(config)
    await manager.initialize()
    try:
        await manager.create_tables()
    finally:
        await manager.close()
    return {"status": "ok"}


async def main(argv: Optional[List[str]] = None, config: Optional[Config] = None) -> int:
    """Main entry point for the Exercise Tracker command line.

    Args:
        argv: Command line arguments, defaults to ``sys.argv[1:]``
        config: Override the configuration loaded from the environment

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    # Load configuration
    config = config or Config.from_env()
    configure_logging(config)

    service = ExerciseTrackerService(config)
    try:
        if args.command == "init-db":
            result = await init_db(config)
        else:
            await service.start()
            result = await execute(service, args)
    except ExerciseTrackerError as e:
        logger.info(f"Command {args.command} failed: {e}")
        print(json.dumps(e.to_dict()))
        return 1
    finally:
        if service.is_running:
            await service.stop()

    print(json.dumps(result))
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
