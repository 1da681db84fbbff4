"""
Cleanup Task

Celery beat task for the periodic purge of expired files.
Thin wrapper that delegates to the ExpiryReaper.
"""

import logging

from celery import shared_task
from flask import current_app

from dropvault.config.celery_config import REAP_TASK_NAME
from dropvault.domain.file_lifecycle.reaper import ExpiryReaper

logger = logging.getLogger(__name__)


def run_reaper(container) -> dict:
    """
    Run one reaper pass plus the orphan sweep.

    The reaper is resolved from the DependencyContainer, never built here.
    A failure of the whole pass (e.g. the metadata store is down) is logged
    and reported in the stats; the beat schedule retries on its next tick.

    Returns:
        dict: Cleanup statistics with counts and errors
    """
    logger.info("Starting expired file cleanup")

    stats = {
        "scanned": 0,
        "records_deleted": 0,
        "blobs_deleted": 0,
        "blobs_missing": 0,
        "blob_failures": 0,
        "record_failures": 0,
        "orphans_removed": 0,
        "errors": [],
    }

    reaper = container.resolve(ExpiryReaper)

    try:
        stats.update(reaper.run().to_dict())
    except Exception as e:
        error_msg = f"Error reaping expired files: {e}"
        stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    try:
        stats["orphans_removed"] = reaper.sweep_orphans()
    except Exception as e:
        error_msg = f"Error sweeping orphaned blobs: {e}"
        stats["errors"].append(error_msg)
        logger.error(error_msg, exc_info=True)

    logger.info(
        f"Cleanup finished: {stats['records_deleted']}/{stats['scanned']} expired files "
        f"removed, {stats['orphans_removed']} orphaned blobs removed, "
        f"{len(stats['errors'])} errors"
    )
    return stats


@shared_task(bind=True, name=REAP_TASK_NAME)
def reap_expired_files(self):
    """
    Periodic task that removes expired files and orphaned blobs.

    Runs daily (Celery beat schedule in CeleryConfig) inside the Flask app
    context, so the container comes from current_app.
    """
    return run_reaper(current_app.container)
