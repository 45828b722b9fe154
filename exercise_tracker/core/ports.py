"""Store contract consumed by the exercise log service."""

from typing import List, Optional, Protocol

from .entities import Exercise, User, UserSummary


class UserStore(Protocol):
    """Protocol for persistent User document stores.

    Each operation is a single document read or a single document
    read-modify-write. Backend failures are raised as ``StoreError``.
    """

    async def insert_user(self, username: str) -> User:
        """Persist a new user with no exercises and return it with its ID.

        Raises ``DuplicateUsernameError`` if the backend enforces unique
        usernames and the name is taken.
        """
        ...

    async def find_user_by_username(self, username: str) -> Optional[User]:
        """Find a user by exact username."""
        ...

    async def find_all_users(self) -> List[UserSummary]:
        """List every user as ``{id, username}`` in store order."""
        ...

    async def append_exercise(self, user_id: str, exercise: Exercise) -> Optional[User]:
        """Atomically append an exercise; return the updated user or None."""
        ...

    async def find_user_by_id(self, user_id: str) -> Optional[User]:
        """Find a user by ID."""
        ...
