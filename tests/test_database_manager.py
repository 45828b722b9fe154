"""Integration tests for DatabaseManager."""

import dataclasses
from datetime import date

import pytest
from sqlalchemy import text, update
from sqlalchemy.ext.asyncio import AsyncSession

from exercise_tracker.adapters.database.manager import DatabaseManager
from exercise_tracker.adapters.database.models import UserDocument
from exercise_tracker.config import Config, Environment
from exercise_tracker.core.entities import UserSummary
from exercise_tracker.core.errors import DuplicateUsernameError, StoreError
from tests.factories import ExerciseFactory
from tests.utils import count_users, count_users_named, descriptions


@pytest.mark.integration
class TestDatabaseManager:
    """Test suite for DatabaseManager lifecycle."""

    @pytest.mark.asyncio
    async def test_database_manager_initialization(self, test_config: Config):
        """Test database manager initialization and cleanup."""
        manager = DatabaseManager(test_config)

        # Initially not initialized
        with pytest.raises(RuntimeError, match="not initialized"):
            async with manager.get_session():
                pass
        with pytest.raises(RuntimeError, match="not initialized"):
            manager.engine

        # Initialize
        await manager.initialize()

        # Should work after initialization
        async with manager.get_session() as session:
            assert isinstance(session, AsyncSession)

        # Cleanup
        await manager.close()

        # Should not work after cleanup
        with pytest.raises(RuntimeError, match="not initialized"):
            async with manager.get_session():
                pass

    @pytest.mark.asyncio
    async def test_double_initialization_warning(self, test_config: Config, caplog):
        """Test that double initialization logs a warning."""
        manager = DatabaseManager(test_config)

        await manager.initialize()

        # Second initialization should warn
        await manager.initialize()

        assert "already initialized" in caplog.text

        await manager.close()

    @pytest.mark.asyncio
    async def test_session_context_manager(self, database_manager: DatabaseManager):
        """Test session context manager behavior."""
        async with database_manager.get_session() as session:
            assert session.is_active

            result = await session.execute(text("SELECT 1"))
            assert result.scalar() == 1

    @pytest.mark.asyncio
    async def test_drop_tables(self, database_manager: DatabaseManager):
        await database_manager.drop_tables()

        with pytest.raises(StoreError):
            await database_manager.find_all_users()

        await database_manager.create_tables()
        assert await database_manager.find_all_users() == []

    @pytest.mark.asyncio
    async def test_create_tables_unreachable_database(self, test_config: Config, tmp_path):
        """DDL failures surface as StoreError like every other store call."""
        config = dataclasses.replace(
            test_config, database_url=f"sqlite:///{tmp_path}/missing/exercise_tracker.db"
        )
        manager = DatabaseManager(config)
        await manager.initialize()

        try:
            with pytest.raises(StoreError, match="Failed to create tables"):
                await manager.create_tables()
        finally:
            await manager.close()

    @pytest.mark.asyncio
    async def test_sql_echo_only_outside_production(self, test_config: Config):
        debug_config = dataclasses.replace(test_config, log_level="DEBUG")
        production_config = dataclasses.replace(debug_config, environment=Environment.PRODUCTION)

        for config, echo in [(debug_config, True), (production_config, False)]:
            manager = DatabaseManager(config)
            await manager.initialize()
            try:
                assert manager.engine.sync_engine.echo is echo
            finally:
                await manager.close()


@pytest.mark.integration
class TestUserStore:
    """Test the user store operations against SQLite."""

    @pytest.mark.asyncio
    async def test_insert_user(self, database_manager: DatabaseManager):
        user = await database_manager.insert_user("alice")

        assert user.id and len(user.id) == 32
        assert user.username == "alice"
        assert user.exercises == []

        async with database_manager.get_session() as session:
            assert await count_users(session) == 1

    @pytest.mark.asyncio
    async def test_unique_username_index(self, database_manager: DatabaseManager):
        await database_manager.insert_user("alice")

        with pytest.raises(DuplicateUsernameError) as exc_info:
            await database_manager.insert_user("alice")

        assert exc_info.value.username == "alice"
        assert isinstance(exc_info.value, StoreError)
        async with database_manager.get_session() as session:
            assert await count_users_named(session, "alice") == 1

    @pytest.mark.asyncio
    async def test_find_user_by_username(self, database_manager: DatabaseManager):
        created = await database_manager.insert_user("alice")

        found = await database_manager.find_user_by_username("alice")

        assert found == created
        assert await database_manager.find_user_by_username("ALICE") is None

    @pytest.mark.asyncio
    async def test_find_user_by_id(self, database_manager: DatabaseManager):
        created = await database_manager.insert_user("alice")

        assert await database_manager.find_user_by_id(created.id) == created
        assert await database_manager.find_user_by_id("0" * 32) is None

    @pytest.mark.asyncio
    async def test_find_all_users(self, database_manager: DatabaseManager):
        alice = await database_manager.insert_user("alice")
        bob = await database_manager.insert_user("bob")

        users = await database_manager.find_all_users()

        assert all(isinstance(user, UserSummary) for user in users)
        assert sorted(users, key=lambda u: u.username) == [alice.summary(), bob.summary()]

    @pytest.mark.asyncio
    async def test_append_exercise_preserves_order(self, database_manager: DatabaseManager):
        user = await database_manager.insert_user("alice")
        exercises = [
            ExerciseFactory.create("swim", 20, date(2020, 2, 1)),
            ExerciseFactory.create("run", 30, date(2020, 1, 1)),
            ExerciseFactory.create("row", 15, date(2020, 3, 1)),
        ]

        for exercise in exercises:
            updated = await database_manager.append_exercise(user.id, exercise)

        assert updated.exercises == exercises

        reloaded = await database_manager.find_user_by_id(user.id)
        assert descriptions(reloaded.exercises) == ["swim", "run", "row"]
        assert reloaded.exercises[1].date == date(2020, 1, 1)

    @pytest.mark.asyncio
    async def test_append_exercise_unknown_user(self, database_manager: DatabaseManager):
        result = await database_manager.append_exercise("0" * 32, ExerciseFactory.create())

        assert result is None

    @pytest.mark.asyncio
    async def test_append_exercise_only_touches_one_user(self, database_manager: DatabaseManager):
        alice = await database_manager.insert_user("alice")
        bob = await database_manager.insert_user("bob")

        await database_manager.append_exercise(alice.id, ExerciseFactory.create())

        assert (await database_manager.find_user_by_id(bob.id)).exercises == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_alice_scenario_against_database(db_exercise_log):
    """The engine behaves the same on the SQL store as in memory."""
    created = await db_exercise_log.create_user("alice")
    conflict = await db_exercise_log.create_user("alice")
    assert conflict.message == "User <alice> already exists."

    await db_exercise_log.add_exercise(created.id, "run", 30, "2020-01-01")
    await db_exercise_log.add_exercise(created.id, "swim", 20, "2020-02-01")

    assert descriptions((await db_exercise_log.get_log(created.id, from_="2020-01-15")).exercises) == ["swim"]
    assert descriptions((await db_exercise_log.get_log(created.id, limit="1")).exercises) == ["run"]
    assert (await db_exercise_log.get_log(created.id, from_="2020-01-01", to="2020-02-01")).exercises == []

    full = await db_exercise_log.get_log(created.id)
    assert full.id == created.id
    assert descriptions(full.exercises) == ["run", "swim"]


@pytest.mark.integration
class TestMalformedDocuments:
    """Stored exercises that cannot be read back are reported as StoreError."""

    async def _corrupt(self, database_manager: DatabaseManager, user_id: str, exercises):
        async with database_manager.get_session() as session:
            await session.execute(
                update(UserDocument).where(UserDocument.id == user_id).values(exercises=exercises)
            )
            await session.commit()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exercises",
        [
            [{"description": "x"}],
            [{"description": "run", "duration": 30, "date": "yesterday"}],
            ["run"],
        ],
    )
    async def test_find_user_by_id(self, database_manager: DatabaseManager, exercises):
        user = await database_manager.insert_user("alice")
        await self._corrupt(database_manager, user.id, exercises)

        with pytest.raises(StoreError, match="Malformed exercise log") as exc_info:
            await database_manager.find_user_by_id(user.id)

        assert isinstance(exc_info.value.__cause__, (KeyError, ValueError, TypeError))

    @pytest.mark.asyncio
    async def test_find_user_by_username(self, database_manager: DatabaseManager):
        user = await database_manager.insert_user("alice")
        await self._corrupt(database_manager, user.id, [{"description": "x"}])

        with pytest.raises(StoreError):
            await database_manager.find_user_by_username("alice")

    @pytest.mark.asyncio
    async def test_append_exercise(self, database_manager: DatabaseManager):
        user = await database_manager.insert_user("alice")
        await self._corrupt(database_manager, user.id, [{"description": "x"}])

        with pytest.raises(StoreError):
            await database_manager.append_exercise(user.id, ExerciseFactory.create())

    @pytest.mark.asyncio
    async def test_get_log_reports_store_error(self, database_manager: DatabaseManager, db_exercise_log):
        user = await database_manager.insert_user("alice")
        await self._corrupt(database_manager, user.id, [{"description": "x"}])

        with pytest.raises(StoreError) as exc_info:
            await db_exercise_log.get_log(user.id, limit=1)

        assert exc_info.value.status_code == 500
