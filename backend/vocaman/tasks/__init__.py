# This file makes the tasks directory a Python package
# Import all task modules to ensure they are registered with Celery

from . import notification_tasks

# Explicitly import the tasks to register them
from .notification_tasks import create_notification_task

__all__ = [
    'create_notification_task',
]
