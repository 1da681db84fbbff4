"""
Unit tests for the Celery configuration.
"""

from flask import Flask

from dropvault.config.celery_config import REAP_TASK_NAME, CeleryConfig, make_celery


def test_reaper_is_scheduled_and_routed():
    entry = CeleryConfig.beat_schedule["reap-expired-files"]

    assert entry["task"] == REAP_TASK_NAME
    assert CeleryConfig.task_routes[REAP_TASK_NAME] == {"queue": "cleanup_queue"}


def test_tasks_run_inside_app_context():
    app = Flask(__name__)
    app.config["MARKER"] = "inside"
    celery = make_celery(app)

    @celery.task
    def read_marker():
        from flask import current_app

        return current_app.config["MARKER"]

    assert read_marker() == "inside"


def test_missed_reaper_ticks_expire():
    entry = CeleryConfig.beat_schedule["reap-expired-files"]

    assert entry["options"]["expires"] == 3600
    assert CeleryConfig.task_soft_time_limit < CeleryConfig.task_time_limit
