"""
Celery Application Instance

Creates the Celery app instance for use by workers and the beat scheduler.
Uses the app factory so that every service is initialized.
"""

import logging
import os

from app_factory import create_app

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

# Flask app with all services initialized (including dependency container)
flask_app = create_app()

# Celery instance from the Flask app
celery_app = flask_app.celery

# Task modules are imported by name when the worker starts, after
# `celery_app` exists, to avoid a circular import at module load.
celery_app.conf.imports = (
    "sharebox.tasks.cleanup_task",
)
