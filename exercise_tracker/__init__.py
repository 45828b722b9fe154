"""Exercise Tracker: users, exercise logs and date-range log queries."""

__version__ = "0.1.0"
