"""Main service class for the Exercise Tracker."""

import logging
from typing import Optional

from exercise_tracker.config import Config
from exercise_tracker.core.ports import UserStore
from exercise_tracker.adapters.database.manager import DatabaseManager
from exercise_tracker.adapters.observability import initialize_metrics, shutdown_metrics
from exercise_tracker.application.exercise_log_service import ExerciseLogService


logger = logging.getLogger(__name__)


class ExerciseTrackerService:
    """Owns the infrastructure behind the exercise log use cases.

    The service directly manages its components without a dependency
    injection framework. ``start()`` wires the store, metrics provider and
    ExerciseLogService; ``stop()`` releases them.
    """

    def __init__(self, config: Config, store: Optional[UserStore] = None):
        """Initialize the Exercise Tracker service.

        Args:
            config: Service configuration
            store: Optional user store for dependency injection.
                   If not provided, a DatabaseManager is created from config.
        """
        self.config = config
        self._running = False

        # Infrastructure components
        self._database_manager: Optional[DatabaseManager] = None
        self._store: Optional[UserStore] = None
        self._metrics_provider = None
        self._exercise_log: Optional[ExerciseLogService] = None

        # Provided dependencies
        self._provided_store = store

    @property
    def exercise_log(self) -> ExerciseLogService:
        """The exercise log use cases. Only available while running."""
        if self._exercise_log is None:
            raise RuntimeError("Service not started. Call start() first.")
        return self._exercise_log

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the Exercise Tracker service."""
        if self._running:
            logger.warning("Exercise Tracker service already started")
            return

        logger.info("Starting Exercise Tracker service")
        try:
            await self._initialize_infrastructure()
        except Exception:
            await self._cleanup_infrastructure()
            raise
        self._running = True

    async def stop(self) -> None:
        """Stop the Exercise Tracker service."""
        logger.info("Stopping Exercise Tracker service")
        self._running = False
        self._exercise_log = None
        await self._cleanup_infrastructure()
        logger.info("Exercise Tracker service stopped")

    async def _initialize_infrastructure(self) -> None:
        """Initialize all infrastructure components."""
        logger.info("Initializing infrastructure components")

        # Initialize metrics provider first
        self._metrics_provider = initialize_metrics(self.config)

        # Initialize the store
        if self._provided_store is not None:
            self._store = self._provided_store
        else:
            self._database_manager = DatabaseManager(self.config)
            await self._database_manager.initialize()
            if self.config.database_auto_create:
                await self._database_manager.create_tables()
            self._store = self._database_manager

        self._exercise_log = ExerciseLogService(
            store=self._store,
            metrics=self._metrics_provider,
        )

        logger.info("Infrastructure initialization completed")

    async def _cleanup_infrastructure(self) -> None:
        """Clean up all infrastructure components."""
        logger.info("Cleaning up infrastructure components")

        # Close database connection
        if self._database_manager:
            try:
                await self._database_manager.close()
            except Exception as e:
                logger.error(f"Error during database disconnect: {e}")
            self._database_manager = None

        self._store = None

        # Shutdown metrics provider
        shutdown_metrics()
        self._metrics_provider = None

        logger.info("Infrastructure cleanup completed")
