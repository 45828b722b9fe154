"""Constants for OpenTelemetry metrics."""

# Metric name prefixes
METRIC_PREFIX = "exercise_tracker"

# User metrics
USERS_CREATED = f"{METRIC_PREFIX}.users.created_total"
USER_CONFLICTS = f"{METRIC_PREFIX}.users.conflicts_total"

# Exercise log metrics
EXERCISES_ADDED = f"{METRIC_PREFIX}.exercises.added_total"
LOG_QUERIES = f"{METRIC_PREFIX}.log.queries_total"

# Store metrics
STORE_CALL_DURATION = f"{METRIC_PREFIX}.store.call_duration"
STORE_ERRORS = f"{METRIC_PREFIX}.store.errors_total"

# Common label keys
LABEL_OPERATION = "operation"
LABEL_ERROR_TYPE = "error_type"
LABEL_QUERY_BRANCH = "branch"
LABEL_DEFAULT_DATE = "default_date"

# Log query branches
BRANCH_FULL = "full"
BRANCH_FILTERED = "filtered"
