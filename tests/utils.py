"""Test utility functions."""

from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from exercise_tracker.adapters.database.models import UserDocument
from exercise_tracker.core.entities import Exercise, User


async def count_users(session: AsyncSession) -> int:
    """Count the number of users in the database."""
    result = await session.execute(select(func.count()).select_from(UserDocument))
    return result.scalar_one()


async def count_users_named(session: AsyncSession, username: str) -> int:
    """Count the users stored under a username."""
    result = await session.execute(
        select(func.count()).select_from(UserDocument).where(UserDocument.username == username)
    )
    return result.scalar_one()


def descriptions(exercises: List[Exercise]) -> List[str]:
    """Exercise descriptions in order, for compact assertions."""
    return [exercise.description for exercise in exercises]


def assert_user_equals(actual: User, expected: User, ignore_id: bool = True):
    """Assert that two User objects are equal."""
    if not ignore_id:
        assert actual.id == expected.id

    assert actual.username == expected.username
    assert actual.exercises == expected.exercises
