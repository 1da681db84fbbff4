"""
Celery Tasks

Periodic maintenance tasks run by the Celery worker and beat scheduler.
"""

from .cleanup_task import reap_expired_files, run_reaper

__all__ = ["reap_expired_files", "run_reaper"]
