"""
Celery Application Instance

Creates the Celery app instance for use by workers and the beat scheduler.
Uses the app factory so tasks resolve the same wired services as the API.
"""

from tempshare.app_factory import create_app

flask_app = create_app()

celery_app = flask_app.celery

# Task modules are imported by name when the worker starts, after
# `celery_app` exists, so they can use it in their decorators.
celery_app.conf.imports = (
    "tempshare.tasks.sweep_task",
)
