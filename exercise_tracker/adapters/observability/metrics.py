"""OpenTelemetry metrics provider for exercise-tracker."""

import logging
import time
from contextlib import contextmanager
from typing import Optional

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    PeriodicExportingMetricReader,
)
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME

from ...config import Config
from .constants import (
    EXERCISES_ADDED,
    LABEL_DEFAULT_DATE,
    LABEL_ERROR_TYPE,
    LABEL_OPERATION,
    LABEL_QUERY_BRANCH,
    LOG_QUERIES,
    STORE_CALL_DURATION,
    STORE_ERRORS,
    USER_CONFLICTS,
    USERS_CREATED,
)

logger = logging.getLogger(__name__)


class MetricsProvider:
    """Manages OpenTelemetry metrics for the exercise-tracker service."""

    def __init__(self, config: Config):
        """Initialize the metrics provider.

        Args:
            config: Application configuration
        """
        self.config = config
        self._meter_provider: Optional[MeterProvider] = None
        self._meter: Optional[metrics.Meter] = None
        self._initialized = False

        # Metric instruments - initialized in initialize()
        self._users_created_counter = None
        self._user_conflicts_counter = None
        self._exercises_added_counter = None
        self._log_queries_counter = None
        self._store_duration_histogram = None
        self._store_errors_counter = None

    @property
    def enabled(self) -> bool:
        """True once initialized with metrics export turned on."""
        return self._initialized and self.config.otel_enabled

    def initialize(self) -> None:
        """Initialize the OpenTelemetry metrics provider."""
        if self._initialized:
            logger.warning("Metrics provider already initialized")
            return

        if not self.config.otel_enabled:
            logger.info("OpenTelemetry metrics disabled")
            self._initialized = True
            return

        try:
            # Create resource with service information
            resource = Resource.create({
                SERVICE_NAME: self.config.otel_service_name,
                "environment": self.config.environment.value,
            })

            readers = []
            if self.config.otel_exporter_type == "console":
                exporter = ConsoleMetricExporter()
                logger.info("Using console metric exporter")
            elif self.config.otel_exporter_type == "otlp":
                exporter = OTLPMetricExporter(
                    endpoint=self.config.otel_otlp_endpoint,
                    insecure=True,  # Use insecure for local development
                )
                logger.info(f"Using OTLP metric exporter: {self.config.otel_otlp_endpoint}")
            else:
                exporter = None
                logger.info("Metrics export disabled (exporter_type='none')")

            if exporter is not None:
                readers.append(
                    PeriodicExportingMetricReader(
                        exporter=exporter,
                        export_interval_millis=self.config.otel_export_interval_millis,
                        export_timeout_millis=self.config.otel_export_timeout_millis,
                    )
                )

            self._meter_provider = MeterProvider(
                resource=resource,
                metric_readers=readers,
            )
            self._meter = self._meter_provider.get_meter(__name__)

            self._create_instruments()

            self._initialized = True
            logger.info("Metrics provider initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize metrics provider: {e}")
            self._initialized = False
            raise

    def _create_instruments(self) -> None:
        """Create all metric instruments."""
        if not self._meter:
            return

        self._users_created_counter = self._meter.create_counter(
            name=USERS_CREATED,
            description="Total number of users created",
            unit="1",
        )

        self._user_conflicts_counter = self._meter.create_counter(
            name=USER_CONFLICTS,
            description="Total number of user creations rejected as duplicates",
            unit="1",
        )

        self._exercises_added_counter = self._meter.create_counter(
            name=EXERCISES_ADDED,
            description="Total number of exercises appended to user logs",
            unit="1",
        )

        self._log_queries_counter = self._meter.create_counter(
            name=LOG_QUERIES,
            description="Total number of exercise log queries",
            unit="1",
        )

        self._store_duration_histogram = self._meter.create_histogram(
            name=STORE_CALL_DURATION,
            description="Duration of store adapter calls in seconds",
            unit="s",
        )

        self._store_errors_counter = self._meter.create_counter(
            name=STORE_ERRORS,
            description="Total number of failed store adapter calls",
            unit="1",
        )

    def shutdown(self) -> None:
        """Shutdown the metrics provider and flush any pending metrics."""
        if self._meter_provider:
            try:
                self._meter_provider.shutdown()
                logger.info("Metrics provider shut down")
            except Exception as e:
                logger.error(f"Error shutting down metrics provider: {e}")

    # User metrics

    def record_user_created(self) -> None:
        """Record a newly created user."""
        if not self.enabled:
            return

        if self._users_created_counter:
            self._users_created_counter.add(1)

    def record_user_conflict(self) -> None:
        """Record a user creation answered with the conflict message."""
        if not self.enabled:
            return

        if self._user_conflicts_counter:
            self._user_conflicts_counter.add(1)

    # Exercise log metrics

    def record_exercise_added(self, default_date: bool) -> None:
        """Record an appended exercise."""
        if not self.enabled:
            return

        if self._exercises_added_counter:
            self._exercises_added_counter.add(1, {
                LABEL_DEFAULT_DATE: str(default_date).lower(),
            })

    def record_log_query(self, branch: str) -> None:
        """Record a log query and which branch served it."""
        if not self.enabled:
            return

        if self._log_queries_counter:
            self._log_queries_counter.add(1, {
                LABEL_QUERY_BRANCH: branch,
            })

    # Store metrics

    def record_store_call(
        self,
        operation: str,
        duration: float,
        error_type: Optional[str] = None,
    ) -> None:
        """Record a store adapter call."""
        if not self.enabled:
            return

        labels = {LABEL_OPERATION: operation}
        if error_type:
            labels[LABEL_ERROR_TYPE] = error_type

        if self._store_duration_histogram:
            self._store_duration_histogram.record(duration, labels)

        if error_type and self._store_errors_counter:
            self._store_errors_counter.add(1, labels)

    @contextmanager
    def measure_store_call(self, operation: str):
        """Context manager to measure a store call.

        Usage:
            with metrics.measure_store_call("append_exercise"):
                user = await store.append_exercise(user_id, exercise)
        """
        start_time = time.time()
        try:
            yield
        except Exception as e:
            self.record_store_call(operation, time.time() - start_time, type(e).__name__)
            raise
        self.record_store_call(operation, time.time() - start_time)


# Global metrics provider instance
_metrics_provider: Optional[MetricsProvider] = None


def get_metrics_provider() -> Optional[MetricsProvider]:
    """Get the global metrics provider instance."""
    return _metrics_provider


def initialize_metrics(config: Config) -> MetricsProvider:
    """Initialize the global metrics provider.

    Args:
        config: Application configuration

    Returns:
        The initialized MetricsProvider instance
    """
    global _metrics_provider

    if _metrics_provider is not None:
        logger.warning("Metrics provider already initialized")
        return _metrics_provider

    _metrics_provider = MetricsProvider(config)
    _metrics_provider.initialize()

    return _metrics_provider


def shutdown_metrics() -> None:
    """Shutdown the global metrics provider."""
    global _metrics_provider

    if _metrics_provider:
        _metrics_provider.shutdown()
        _metrics_provider = None
