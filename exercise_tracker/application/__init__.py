"""Application layer for the Exercise Tracker.

This layer contains the use cases that orchestrate the core model and the
store adapter.
"""

from .exercise_log_service import ExerciseLogService

__all__ = ["ExerciseLogService"]
