"""Job ID management for log correlation.

Each scheduled job run (Celery task or CLI invocation) gets its own job ID so
that all log lines of one sweep or notifier pass can be grouped.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

job_id_var: ContextVar[Optional[str]] = ContextVar("job_id", default=None)


def generate_job_id() -> str:
    """Generate a new unique job ID.

    Returns:
        str: UUID v4 job ID
    """
    return str(uuid.uuid4())


def get_job_id() -> str:
    """Get current job ID from context.

    Returns:
        str: Current job ID or "no-job-id" if not set
    """
    return job_id_var.get() or "no-job-id"


@contextmanager
def job_context(job_id: Optional[str] = None) -> Iterator[str]:
    """Bind a job ID to the current context for the duration of a run.

    Usage:
        with job_context() as job_id:
            sweeper.sweep()
    """
    token = job_id_var.set(job_id or generate_job_id())
    try:
        yield job_id_var.get()
    finally:
        job_id_var.reset(token)
