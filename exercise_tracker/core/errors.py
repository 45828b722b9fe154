"""Exceptions raised by the exercise tracker core and its adapters.

Every error carries the HTTP status a transport layer should answer with,
so callers can map failures without knowing the concrete exception type.
"""

from typing import Any, Dict, Optional


MISSING_USER_ID_MESSAGE = (
    "Must include a user ID in the query string. "
    "Example: '/api/exercise/log?userId={userId}'"
)


class ExerciseTrackerError(Exception):
    """Base exception for exercise tracker errors."""

    status_code: int = 500

    def to_dict(self) -> Dict[str, Any]:
        """Error body in the shape returned to API clients."""
        return {"error": str(self)}


class UserInputError(ExerciseTrackerError):
    """The caller supplied missing or malformed input."""

    status_code = 400


class MissingUserIdError(UserInputError):
    """A log query was made without a user ID."""

    def __init__(self, message: str = MISSING_USER_ID_MESSAGE):
        super().__init__(message)


class InvalidParameterError(UserInputError):
    """A parameter could not be parsed (bad date, bad limit, ...)."""

    def __init__(self, parameter: str, message: str):
        super().__init__(message)
        self.parameter = parameter


class UserNotFoundError(ExerciseTrackerError):
    """No user exists with the given ID."""

    status_code = 404

    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class StoreError(ExerciseTrackerError):
    """The store adapter failed (connectivity, bad document, write conflict)."""

    status_code = 500


class DuplicateUsernameError(StoreError):
    """The store rejected a user because the username is already taken."""

    status_code = 409

    def __init__(self, username: str, message: Optional[str] = None):
        super().__init__(message or f"Username {username} is already taken")
        self.username = username
