"""
Celery Configuration

Configures Celery with Flask integration, Redis broker, task routing and
the beat schedule that drives the expiry reaper.
"""

import os

from celery import Celery
from celery.schedules import crontab
from kombu import Queue

from dropvault.config.redis_config import RedisConfig

REAP_TASK_NAME = "dropvault.tasks.reap_expired_files"


class CeleryConfig:
    """Celery configuration settings."""

    # Defaults to the Redis the metadata store uses
    broker_url = os.getenv("CELERY_BROKER_URL", RedisConfig().connection_url())
    result_backend = os.getenv("CELERY_RESULT_BACKEND", RedisConfig().connection_url())

    task_serializer = "json"
    accept_content = ["json"]
    result_serializer = "json"
    timezone = "UTC"
    enable_utc = True

    # Redelivered if the worker dies mid-pass
    task_acks_late = True
    worker_prefetch_multiplier = 1

    task_routes = {
        REAP_TASK_NAME: {"queue": "cleanup_queue"},
    }

    task_default_queue = "default"
    task_queues = (
        Queue("default", routing_key="default"),
        Queue("cleanup_queue", routing_key="cleanup"),
    )

    # Daily at midnight UTC by default. A tick no worker picks up within
    # an hour is dropped rather than queued behind the next one.
    beat_schedule = {
        "reap-expired-files": {
            "task": REAP_TASK_NAME,
            "schedule": crontab(
                hour=os.getenv("REAPER_CRON_HOUR", "0"),
                minute=os.getenv("REAPER_CRON_MINUTE", "0"),
            ),
            "options": {"expires": 3600},
        },
    }

    # Seconds
    task_soft_time_limit = int(os.getenv("REAPER_SOFT_TIME_LIMIT", 600))
    task_time_limit = int(os.getenv("REAPER_TIME_LIMIT", 900))

    # Keep the last pass's stats until the next daily run
    result_expires = 86400


def make_celery(app):
    """
    Create Celery instance with Flask app context.

    Args:
        app: Flask application instance

    Returns:
        Configured Celery instance
    """
    celery = Celery(
        app.import_name,
        backend=CeleryConfig.result_backend,
        broker=CeleryConfig.broker_url,
    )

    celery.config_from_object(CeleryConfig)

    # Ensure tasks run within Flask app context
    class ContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""

        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    return celery
