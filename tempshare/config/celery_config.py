"""
Celery Configuration

Configures Celery with Flask integration, Redis broker, task routing and
the periodic sweep schedule.
"""

import os

from celery import Celery
from kombu import Queue

SWEEP_TASK_NAME = "tasks.sweep_expired_objects"


class CeleryConfig:
    """Celery configuration settings."""

    # Broker settings
    broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")

    # Task settings
    task_serializer = "json"
    accept_content = ["json"]
    result_serializer = "json"
    timezone = "UTC"
    enable_utc = True

    # Worker settings
    worker_prefetch_multiplier = 1
    task_acks_late = True

    # Task routing
    task_routes = {
        SWEEP_TASK_NAME: {"queue": "sweep_queue"},
    }

    # Queue definitions
    task_default_queue = "default"
    task_queues = (
        Queue("default", routing_key="default"),
        Queue("sweep_queue", routing_key="sweep"),
    )

    # Beat schedule for periodic tasks
    beat_schedule = {
        "sweep-expired-objects": {
            "task": SWEEP_TASK_NAME,
            "schedule": float(os.getenv("SWEEP_INTERVAL_SECONDS", 3600)),
        },
    }

    # A sweep that hits the soft limit stops and releases its lock; the next tick resumes
    task_soft_time_limit = int(os.getenv("CELERY_TASK_SOFT_TIME_LIMIT", 3000))
    task_time_limit = int(os.getenv("CELERY_TASK_TIME_LIMIT", 3300))

    # Result backend settings
    result_expires = 3600


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

    class ContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""

        def __call__(self, *args, **kwargs):
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = ContextTask
    return celery
