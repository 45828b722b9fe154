"""Core layer for the exercise tracker.

This module provides the domain entities, the log query rules and the
error hierarchy shared by the application and adapter layers.
"""

from .entities import Exercise, ExerciseLog, User, UserConflict, UserSummary
from .errors import (
    DuplicateUsernameError,
    ExerciseTrackerError,
    InvalidParameterError,
    MissingUserIdError,
    StoreError,
    UserInputError,
    UserNotFoundError,
)
from .log_query import LogQuery, parse_calendar_date, parse_limit
from .ports import UserStore

__all__ = [
    "Exercise",
    "ExerciseLog",
    "User",
    "UserConflict",
    "UserSummary",
    "LogQuery",
    "parse_calendar_date",
    "parse_limit",
    "UserStore",
    # Exceptions
    "ExerciseTrackerError",
    "UserInputError",
    "MissingUserIdError",
    "InvalidParameterError",
    "UserNotFoundError",
    "StoreError",
    "DuplicateUsernameError",
]
