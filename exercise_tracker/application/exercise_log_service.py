"""User registration and exercise log use cases."""

from contextlib import nullcontext
from datetime import date, datetime, timezone
from typing import Callable, List, Optional, Union

import structlog

from ..adapters.observability.constants import BRANCH_FILTERED, BRANCH_FULL
from ..adapters.observability.metrics import MetricsProvider
from ..core.entities import Exercise, ExerciseLog, User, UserConflict, UserSummary
from ..core.errors import (
    DuplicateUsernameError,
    InvalidParameterError,
    MissingUserIdError,
    UserNotFoundError,
)
from ..core.log_query import DateParam, LimitParam, LogQuery, parse_calendar_date
from ..core.ports import UserStore

logger = structlog.get_logger()


def utc_today() -> date:
    """Current calendar date on the server clock, in UTC."""
    return datetime.now(timezone.utc).date()


class ExerciseLogService:
    """Creates users, appends exercises and answers log queries.

    The service keeps no state between calls; everything lives in the
    store. It performs no locking of its own, so two concurrent
    ``create_user`` calls for one username are only kept apart by the
    store's unique index, if it has one.
    """

    def __init__(
        self,
        store: UserStore,
        metrics: Optional[MetricsProvider] = None,
        clock: Callable[[], date] = utc_today,
    ):
        """Initialize the exercise log service.

        Args:
            store: User store adapter
            metrics: Optional metrics provider
            clock: Returns the date used when an exercise has none
        """
        self.store = store
        self.metrics = metrics
        self.clock = clock

    def _measure(self, operation: str):
        """Time a store call when metrics are available."""
        if self.metrics:
            return self.metrics.measure_store_call(operation)
        return nullcontext()

    async def create_user(self, username: str) -> Union[UserSummary, UserConflict]:
        """Register a username.

        Returns:
            The new user's ``{id, username}``, or a UserConflict if the
            username is already registered

        Raises:
            InvalidParameterError: If no username is given
        """
        if not username or not str(username).strip():
            raise InvalidParameterError("username", "Must include a username.")

        with self._measure("find_user_by_username"):
            existing = await self.store.find_user_by_username(username)
        if existing is not None:
            logger.info("User already exists", username=username, user_id=existing.id)
            return self._conflict(username)

        try:
            with self._measure("insert_user"):
                user = await self.store.insert_user(username)
        except DuplicateUsernameError:
            # Another request created the same username after our lookup
            logger.info("User created concurrently", username=username)
            return self._conflict(username)

        logger.info("Created new user", username=username, user_id=user.id)
        if self.metrics:
            self.metrics.record_user_created()
        return user.summary()

    def _conflict(self, username: str) -> UserConflict:
        if self.metrics:
            self.metrics.record_user_conflict()
        return UserConflict(username=username)

    async def list_users(self) -> List[UserSummary]:
        """List all users as ``{id, username}`` in store order."""
        with self._measure("find_all_users"):
            return await self.store.find_all_users()

    async def add_exercise(
        self,
        user_id: str,
        description: str,
        duration: int,
        date: DateParam = None,
    ) -> User:
        """Append an exercise to a user's log.

        ``description`` and ``duration`` are stored as given. A missing date
        defaults to today's date from the service clock.

        Returns:
            The full updated user, including the new exercise

        Raises:
            InvalidParameterError: If ``date`` is not a ``yyyy-mm-dd`` date
            UserNotFoundError: If no user has this ID
        """
        exercise_date = parse_calendar_date(date, "date")
        default_date = exercise_date is None
        if default_date:
            exercise_date = self.clock()

        exercise = Exercise(description=description, duration=duration, date=exercise_date)
        with self._measure("append_exercise"):
            user = await self.store.append_exercise(user_id, exercise)
        if user is None:
            logger.warning("Cannot add exercise for unknown user", user_id=user_id)
            raise UserNotFoundError(user_id)

        logger.info(
            "Added exercise",
            user_id=user_id,
            date=exercise_date.isoformat(),
            exercise_count=len(user.exercises),
        )
        if self.metrics:
            self.metrics.record_exercise_added(default_date)
        return user

    async def get_log(
        self,
        user_id: Optional[str],
        from_: DateParam = None,
        to: DateParam = None,
        limit: LimitParam = None,
    ) -> Union[User, ExerciseLog]:
        """Fetch a user's exercise log.

        With no ``from``, ``to`` or ``limit`` the full user document is
        returned. Otherwise the exercises dated strictly after ``from`` and
        strictly before ``to`` are kept in insertion order, cut down to the
        first ``limit`` entries, and returned as ``{username, exercises}``.

        Raises:
            MissingUserIdError: If no user ID is given (the store is not touched)
            InvalidParameterError: If a date or the limit cannot be parsed
            UserNotFoundError: If no user has this ID
        """
        if not user_id or not str(user_id).strip():
            raise MissingUserIdError()

        query = LogQuery.from_params(from_=from_, to=to, limit=limit)

        with self._measure("find_user_by_id"):
            user = await self.store.find_user_by_id(user_id)
        if user is None:
            logger.warning("Log requested for unknown user", user_id=user_id)
            raise UserNotFoundError(user_id)

        if not query.is_filtered:
            if self.metrics:
                self.metrics.record_log_query(BRANCH_FULL)
            return user

        exercises = query.apply(user.exercises)
        logger.debug(
            "Filtered exercise log",
            user_id=user_id,
            from_date=query.from_date.isoformat() if query.from_date else None,
            to_date=query.to_date.isoformat() if query.to_date else None,
            limit=query.limit,
            total=len(user.exercises),
            returned=len(exercises),
        )
        if self.metrics:
            self.metrics.record_log_query(BRANCH_FILTERED)
        return ExerciseLog(username=user.username, exercises=exercises)
