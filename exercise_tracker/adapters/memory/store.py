"""In-process user store for tests and storage-free runs."""

import asyncio
import copy
import logging
from typing import Dict, List, Optional

from ...core.entities import Exercise, User, UserSummary, new_user_id
from ...core.errors import DuplicateUsernameError

logger = logging.getLogger(__name__)


class InMemoryUserStore:
    """Dict-backed user store with the same semantics as DatabaseManager.

    Users are returned as copies so callers can never mutate stored state.
    """

    def __init__(self, enforce_unique_usernames: bool = True):
        self.enforce_unique_usernames = enforce_unique_usernames
        self._users: Dict[str, User] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._users)

    async def insert_user(self, username: str) -> User:
        """Create a new user with an empty exercise log."""
        async with self._lock:
            if self.enforce_unique_usernames and any(
                user.username == username for user in self._users.values()
            ):
                raise DuplicateUsernameError(username)
            user = User(id=new_user_id(), username=username, exercises=[])
            self._users[user.id] = user
            logger.debug(f"Inserted user {user}")
            return copy.deepcopy(user)

    async def find_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by exact username."""
        for user in self._users.values():
            if user.username == username:
                return copy.deepcopy(user)
        return None

    async def find_all_users(self) -> List[UserSummary]:
        """Get every user projected to id and username, in insertion order."""
        return [user.summary() for user in self._users.values()]

    async def find_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    async def append_exercise(self, user_id: str, exercise: Exercise) -> Optional[User]:
        """Append an exercise to a user's log."""
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            user.exercises.append(copy.deepcopy(exercise))
            return copy.deepcopy(user)
