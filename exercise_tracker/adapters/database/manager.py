"""Database infrastructure layer and SQL-backed user store."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import NullPool

from ...config import Config
from ...core.entities import Exercise, User, UserSummary
from ...core.errors import DuplicateUsernameError, StoreError
from .models import Base, UserDocument

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages database connection and implements the user store operations."""

    def __init__(self, config: Config):
        self.config = config
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def initialize(self) -> None:
        """Initialize database engine and session factory."""
        if self._engine is not None:
            logger.warning("Database manager already initialized")
            return

        # Create async engine with proper connection pooling
        self._engine = create_async_engine(
            self.config.get_database_url(),
            # Never echo SQL in production, even at DEBUG
            echo=self.config.log_level == "DEBUG" and not self.config.is_production(),
            poolclass=NullPool,  # Use NullPool for better connection management in async context
            pool_pre_ping=True,  # Verify connections before use
        )

        # Create session factory
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        logger.info("Database manager initialized successfully")

    async def close(self) -> None:
        """Close database engine and clean up resources."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database manager closed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session with automatic cleanup."""
        if self._session_factory is None:
            raise RuntimeError(
                "Database manager not initialized. Call initialize() first."
            )

        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_tables(self) -> None:
        """Create all database tables. Used for testing and local setup."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create tables: {e}")
            raise StoreError(f"Failed to create tables: {e}") from e

        logger.info("Database tables created successfully")

    async def drop_tables(self) -> None:
        """Drop all database tables. Used for testing cleanup."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.drop_all)
        except SQLAlchemyError as e:
            logger.error(f"Failed to drop tables: {e}")
            raise StoreError(f"Failed to drop tables: {e}") from e

        logger.info("Database tables dropped successfully")

    @property
    def engine(self) -> AsyncEngine:
        """Get the database engine."""
        if self._engine is None:
            raise RuntimeError(
                "Database manager not initialized. Call initialize() first."
            )
        return self._engine

    # Conversion methods
    def _convert_db_user_to_core_entity(self, user_record: UserDocument) -> User:
        """Convert database UserDocument model to core User entity.

        Args:
            user_record: SQLAlchemy UserDocument instance

        Returns:
            Core User entity with its exercises in stored order

        Raises:
            StoreError: If an embedded exercise is not a valid
                ``{description, duration, date}`` object
        """
        try:
            exercises = [Exercise.from_dict(item) for item in (user_record.exercises or [])]
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Malformed exercise log for user {user_record.id}: {e!r}")
            raise StoreError(f"Malformed exercise log for user {user_record.id}") from e

        return User(
            id=user_record.id,
            username=user_record.username,
            exercises=exercises,
        )

    # User store methods
    async def insert_user(self, username: str) -> User:
        """Create a new user with an empty exercise log.

        Raises:
            DuplicateUsernameError: If the unique username index rejects the row
            StoreError: On any other database failure
        """
        try:
            async with self.get_session() as session:
                user = UserDocument(username=username, exercises=[])
                session.add(user)
                await session.commit()
                await session.refresh(user)
                return self._convert_db_user_to_core_entity(user)
        except IntegrityError as e:
            logger.info(f"Username {username} rejected by unique index")
            raise DuplicateUsernameError(username) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert user {username}: {e}")
            raise StoreError(f"Failed to insert user: {e}") from e

    async def find_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by exact username."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    select(UserDocument).where(UserDocument.username == username)
                )
                user_record = result.scalars().first()
                return self._convert_db_user_to_core_entity(user_record) if user_record else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up user {username}: {e}")
            raise StoreError(f"Failed to look up user: {e}") from e

    async def find_all_users(self) -> List[UserSummary]:
        """Get every user projected to id and username."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    select(UserDocument.id, UserDocument.username)
                )
                return [UserSummary(id=row.id, username=row.username) for row in result.all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list users: {e}")
            raise StoreError(f"Failed to list users: {e}") from e

    async def find_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by their database ID."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    select(UserDocument).where(UserDocument.id == user_id)
                )
                user_record = result.scalar_one_or_none()
                return self._convert_db_user_to_core_entity(user_record) if user_record else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up user {user_id}: {e}")
            raise StoreError(f"Failed to look up user: {e}") from e

    async def append_exercise(self, user_id: str, exercise: Exercise) -> Optional[User]:
        """Append an exercise to a user's log in a single transaction.

        The user row is locked for the read-modify-write on backends that
        support ``SELECT ... FOR UPDATE``.

        Returns:
            The updated user, or None if no user has this ID
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    select(UserDocument)
                    .where(UserDocument.id == user_id)
                    .with_for_update()
                )
                user_record = result.scalar_one_or_none()
                if user_record is None:
                    return None

                # Assign a new list so the JSON column is flagged as modified
                user_record.exercises = [*(user_record.exercises or []), exercise.to_dict()]
                await session.commit()
                return self._convert_db_user_to_core_entity(user_record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to append exercise for user {user_id}: {e}")
            raise StoreError(f"Failed to append exercise: {e}") from e
