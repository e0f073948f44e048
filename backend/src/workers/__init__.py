"""Background workers module (Celery).

Tasks live with their feature (e.g. documents.tasks); this package only
configures the Celery application and its beat schedule.
"""

from .celery_app import celery_app

__all__ = ["celery_app"]
