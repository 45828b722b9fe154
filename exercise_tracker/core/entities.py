"""Core entities for the exercise tracker."""

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional


def new_user_id() -> str:
    """Generate an opaque user identifier."""
    return uuid.uuid4().hex


@dataclass
class Exercise:
    """A single logged activity, embedded in exactly one User.

    ``duration`` is stored exactly as supplied; it is not validated.
    """

    description: str
    duration: int
    date: date

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the exercise; the date becomes ``yyyy-mm-dd``."""
        return {
            "description": self.description,
            "duration": self.duration,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Exercise":
        """Rebuild an exercise from its serialized form."""
        raw_date = data["date"]
        if not isinstance(raw_date, date):
            raw_date = date.fromisoformat(raw_date)
        return cls(
            description=data["description"],
            duration=data["duration"],
            date=raw_date,
        )


@dataclass
class UserSummary:
    """A User projected to its identifier and username."""

    id: str
    username: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username}


@dataclass
class User:
    """A registered account owning an ordered, append-only exercise log."""

    username: str
    exercises: List[Exercise] = field(default_factory=list)

    # Assigned by the store on creation
    id: Optional[str] = None

    def summary(self) -> UserSummary:
        """Project the user to ``{id, username}``."""
        return UserSummary(id=self.id, username=self.username)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "exercises": [exercise.to_dict() for exercise in self.exercises],
        }

    def __str__(self) -> str:
        return f"User({self.username}, id={self.id})"


@dataclass
class UserConflict:
    """Result of creating a user whose username already exists.

    This is a normal result rather than an error: clients receive the
    message with a success status.
    """

    username: str

    @property
    def message(self) -> str:
        return f"User <{self.username}> already exists."

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


@dataclass
class ExerciseLog:
    """A filtered and/or limited view of a user's exercises.

    Unlike a full User this carries no ``id``.
    """

    username: str
    exercises: List[Exercise] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "exercises": [exercise.to_dict() for exercise in self.exercises],
        }
