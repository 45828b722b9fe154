"""Pytest fixtures for Exercise Tracker tests."""

import sys
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio

# Add the parent directory to the path if not already there
# This ensures the exercise_tracker module can be imported in CI
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from exercise_tracker.config import Config
from exercise_tracker.adapters.database.manager import DatabaseManager
from exercise_tracker.adapters.memory import InMemoryUserStore
from exercise_tracker.adapters.observability import shutdown_metrics
from exercise_tracker.application.exercise_log_service import ExerciseLogService


FIXED_TODAY = date(2021, 6, 15)


@pytest.fixture(autouse=True)
def clean_globals():
    """Reset global metrics between tests."""
    shutdown_metrics()
    yield
    shutdown_metrics()


@pytest.fixture
def fixed_today() -> date:
    """The date the service clock reports in tests."""
    return FIXED_TODAY


@pytest.fixture
def memory_store() -> InMemoryUserStore:
    """Fresh in-memory user store."""
    return InMemoryUserStore()


@pytest.fixture
def exercise_log(memory_store, fixed_today) -> ExerciseLogService:
    """Exercise log service backed by the in-memory store."""
    return ExerciseLogService(memory_store, clock=lambda: fixed_today)


@pytest.fixture
def test_config(tmp_path, monkeypatch) -> Config:
    """Create test configuration pointing at a throwaway SQLite file."""
    database_path = tmp_path / "exercise_tracker.db"

    # Set environment for Config.from_env()
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{database_path}")
    monkeypatch.setenv("ENVIRONMENT", "CI")
    monkeypatch.setenv("DATABASE_AUTO_CREATE", "true")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("LOG_FORMAT", "text")
    monkeypatch.setenv("OTEL_ENABLED", "false")

    return Config.from_env()


@pytest_asyncio.fixture
async def database_manager(test_config):
    """Initialized database manager with a fresh schema."""
    manager = DatabaseManager(test_config)
    await manager.initialize()
    await manager.create_tables()

    yield manager

    await manager.close()


@pytest_asyncio.fixture
async def db_exercise_log(database_manager, fixed_today) -> ExerciseLogService:
    """Exercise log service backed by the SQLite database."""
    return ExerciseLogService(database_manager, clock=lambda: fixed_today)
