"""In-memory adapter for the exercise tracker."""

from .store import InMemoryUserStore

__all__ = ["InMemoryUserStore"]
