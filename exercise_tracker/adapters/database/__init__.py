"""SQL database adapter for the exercise tracker."""

from .manager import DatabaseManager
from .models import Base, UserDocument

__all__ = ["DatabaseManager", "Base", "UserDocument"]
