"""
Celery tasks for the product catalog.

- sync_feed: Run a feed sync on a worker (queued from the API or commands)

Tasks are on-demand only; there is no periodic schedule.
"""

import logging
from typing import Any, Dict, Optional

from celery import shared_task

from catalog.exceptions import FeedError, SyncInProgressError
from catalog.models import FeedSyncJob
from catalog.services import sync_from_feed

logger = logging.getLogger(__name__)


@shared_task(name="catalog.tasks.sync_feed", bind=True)
def sync_feed(
    self, feed_url: str, limit: Optional[int] = None, job_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Feed sync worker task.

    Args:
        feed_url: URL of the feed export
        limit: Reconcile at most this many items
        job_id: UUID of the FeedSyncJob tracking this sync (created if None)

    Returns:
        Dict with sync results, or the error for failed runs
    """
    logger.info(f"Starting feed sync for {feed_url}, job {job_id}")

    job = None
    if job_id:
        try:
            job = FeedSyncJob.objects.get(id=job_id)
        except FeedSyncJob.DoesNotExist as e:
            logger.error(f"Sync job not found: {e}")
            return {"error": str(e), "status": "failed"}

    try:
        result = sync_from_feed(feed_url, limit=limit, job=job)
    except FeedError as e:
        # The job has already been marked failed by the sync
        logger.error(f"Feed sync failed for {feed_url}: {e}")
        return {"error": str(e), "status": "failed", "job_id": job_id}
    except SyncInProgressError as e:
        logger.warning(str(e))
        if job is not None:
            job.complete(success=False, error_message=str(e))
        return {"error": str(e), "status": "failed", "job_id": job_id}

    return {"status": "completed", **result.to_dict()}
