"""Celery application for document pipeline background jobs.

Start a worker and the beat scheduler with:
    celery -A workers.celery_app worker --loglevel=info
    celery -A workers.celery_app beat --loglevel=info
"""

from celery import Celery

from config import settings

celery_app = Celery(
    "document_pipeline",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["documents.tasks"],
)

celery_app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
)

celery_app.conf.beat_schedule = {
    "documents-reconcile-storage-deletions": {
        "task": "documents.reconcile_storage_deletions",
        "schedule": settings.STORAGE_RECONCILE_INTERVAL_MINUTES * 60.0,
        "options": {
            # Skip a run that waited longer than one interval for a worker
            "expires": settings.STORAGE_RECONCILE_INTERVAL_MINUTES * 60,
        },
    },
}
