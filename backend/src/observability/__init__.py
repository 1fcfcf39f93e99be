"""Observability module for Laraflow.

Provides structured logging with job correlation and Prometheus metrics.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    trash_records_erased_total,
    trash_sweep_failures_total,
    trash_sweep_duration_seconds,
    deadline_notifications_sent_total,
    deadline_notifications_failed_total,
)
from .job_context import job_id_var, get_job_id, generate_job_id, job_context

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "trash_records_erased_total",
    "trash_sweep_failures_total",
    "trash_sweep_duration_seconds",
    "deadline_notifications_sent_total",
    "deadline_notifications_failed_total",
    # Job ID
    "job_id_var",
    "get_job_id",
    "generate_job_id",
    "job_context",
]
