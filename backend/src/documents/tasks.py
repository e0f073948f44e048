"""Celery tasks for document storage maintenance.

Tasks:
- reconcile_storage_deletions_task: retries physical deletion of soft-deleted
  documents, scheduled every STORAGE_RECONCILE_INTERVAL_MINUTES by Celery Beat
"""

import asyncio
import logging
from typing import Any, Dict

from celery import shared_task

from config import get_settings
from database import SessionLocal
from .dependencies import get_storage
from .reconciliation import reconcile_storage_deletions

logger = logging.getLogger(__name__)


@shared_task(name="documents.reconcile_storage_deletions", bind=True)
def reconcile_storage_deletions_task(self, batch_size: int = None) -> Dict[str, Any]:
    """Retry physical deletion for soft-deleted documents still in storage.

    Safe to run repeatedly: documents already purged are no longer selected,
    and failures stay eligible for the next run.

    Args:
        batch_size: Maximum documents per run (default: STORAGE_RECONCILE_BATCH_SIZE)

    Returns:
        Dict with examined/deleted/failed counts
    """
    if batch_size is None:
        batch_size = get_settings().STORAGE_RECONCILE_BATCH_SIZE

    logger.info(f"Storage reconciliation task started: batch_size={batch_size}")

    db = SessionLocal()
    try:
        report = asyncio.run(
            reconcile_storage_deletions(db, get_storage(), batch_size)
        )
        result = {"status": "completed", **report.to_dict()}
        return result

    except Exception as e:
        db.rollback()
        logger.error(
            "Storage reconciliation task failed",
            exc_info=True,
            extra={"error": str(e)},
        )
        raise

    finally:
        db.close()
