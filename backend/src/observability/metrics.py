"""Prometheus metrics for the Laraflow maintenance jobs.

Defines operational metrics for monitoring and alerting on the retention
sweep and deadline notification runs.
"""

from prometheus_client import Counter, Histogram

# Retention sweep metrics
trash_records_erased_total = Counter(
    "laraflow_trash_records_erased_total",
    "Total trashed records permanently erased",
    ["entity_type"]
)

trash_sweep_failures_total = Counter(
    "laraflow_trash_sweep_failures_total",
    "Entity types whose sweep failed",
    ["entity_type"]
)

trash_sweep_duration_seconds = Histogram(
    "laraflow_trash_sweep_duration_seconds",
    "Time spent on one retention sweep in seconds",
    ["dry_run"],  # dry_run: true|false
    buckets=[0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 300.0]
)

# Deadline notification metrics
deadline_notifications_sent_total = Counter(
    "laraflow_deadline_notifications_sent_total",
    "Total deadline notifications sent",
    ["kind", "offset_hours"]  # kind: task.due_soon|task.overdue
)

deadline_notifications_failed_total = Counter(
    "laraflow_deadline_notifications_failed_total",
    "Deadline notifications that could not be delivered",
    ["kind"]
)
