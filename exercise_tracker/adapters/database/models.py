"""SQLAlchemy models for the Exercise Tracker service."""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy.sql import func

from ...core.entities import new_user_id

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in local runs and tests)
ExercisesType = JSON().with_variant(JSONB(), "postgresql")


class UserDocument(Base):
    """A user and its embedded, ordered list of exercises.

    Exercises are not stored in a table of their own; each one is a
    ``{description, duration, date}`` object inside the ``exercises`` array.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_user_id)
    username: Mapped[str] = mapped_column(String(255), nullable=False)
    exercises: Mapped[List[Dict[str, Any]]] = mapped_column(
        ExercisesType, nullable=False, default=list
    )

    # Tracking metadata
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        # Backs up the look-before-write check in create_user
        Index("uq_users_username", "username", unique=True),
    )

    def __repr__(self) -> str:
        return f"<UserDocument(id='{self.id}', username='{self.username}', exercises={len(self.exercises or [])})>"
