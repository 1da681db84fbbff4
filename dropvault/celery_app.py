"""
Celery Application Instance

Creates the Celery app instance for use by workers and beat scheduler.
Uses the app factory to ensure all services are properly initialized.

    celery -A dropvault.celery_app:celery_app worker -Q default,cleanup_queue
    celery -A dropvault.celery_app:celery_app beat
"""

from dropvault.app_factory import create_app, require_celery

# Create Flask app with all services initialized (including dependency container)
flask_app = create_app()

# Fails with the cause when Celery could not be set up
celery_app = require_celery(flask_app)

# Task modules are imported by name when the worker starts, so the task
# module never imports this one.
celery_app.conf.imports = ("dropvault.tasks.cleanup_task",)
