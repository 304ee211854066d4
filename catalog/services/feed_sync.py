"""
Feed Sync Orchestration.

One sync run:
1. Fetch and parse the feed (any failure aborts before the catalog is touched)
2. Replace the taxonomy cache from the full pull
3. Reconcile items into the catalog (optionally capped by limit)
4. Restore backups onto products created in this run that have one
5. Record the run on a FeedSyncJob

There is no transaction spanning the run; each step commits its own short
units of work.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.cache import cache
from django.db.models import Max, Q

from catalog.exceptions import FeedError, SyncInProgressError
from catalog.feeds.fetcher import FeedFetcher, fetch_and_parse
from catalog.models import CatalogProduct, FeedSyncJob
from catalog.monitoring import add_sync_breadcrumb, capture_sync_error
from catalog.services.reconciler import reconcile
from catalog.services.restore import restore_created_products
from catalog.services.taxonomy import extract_taxonomy, replace_taxonomy_cache

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "catalog:feed-sync-lock"


@dataclass
class FeedSyncResult:
    """
    Outcome of a sync run.

    Attributes:
        success: True when the run completed
        created: Products inserted
        updated: Products whose feed-owned fields were overwritten
        total_products: Valid items processed (after the limit)
        failed: Items whose write failed
        restored: Reappeared products that got their backup restored
        skipped: Feed items dropped by the parser
        job_id: FeedSyncJob tracking this run
    """

    success: bool = True
    created: int = 0
    updated: int = 0
    total_products: int = 0
    failed: int = 0
    restored: int = 0
    skipped: int = 0
    job_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "created": self.created,
            "updated": self.updated,
            "totalProducts": self.total_products,
            "failed": self.failed,
            "restored": self.restored,
            "skipped": self.skipped,
            "jobId": self.job_id,
        }


def _lock_key(feed_url: str) -> str:
    digest = hashlib.sha256(feed_url.encode()).hexdigest()
    return f"{LOCK_KEY_PREFIX}:{digest}"


def sync_from_feed(
    feed_url: str,
    limit: Optional[int] = None,
    dialect: Optional[str] = None,
    fetcher: Optional[FeedFetcher] = None,
    job: Optional[FeedSyncJob] = None,
) -> FeedSyncResult:
    """
    Run a full feed sync against feed_url.

    Args:
        feed_url: URL of the feed export
        limit: Reconcile at most this many valid items
        dialect: Feed dialect name (default from settings)
        fetcher: Optional FeedFetcher instance
        job: Existing FeedSyncJob to record the run on (created if None)

    Returns:
        FeedSyncResult

    Raises:
        FeedFetchError / FeedParseError: Feed unreachable or unparseable;
            no product was written
        SyncInProgressError: The sync lock is enabled and already held
    """
    lock_enabled = getattr(settings, "FEED_SYNC_LOCK_ENABLED", False)
    lock_key = _lock_key(feed_url)

    if lock_enabled:
        timeout = getattr(settings, "FEED_SYNC_LOCK_TIMEOUT", 1800)
        if not cache.add(lock_key, "locked", timeout):
            logger.warning(f"Sync already running for {feed_url}, refusing to start")
            raise SyncInProgressError(feed_url)

    try:
        return _run_sync(feed_url, limit, dialect, fetcher, job)
    finally:
        if lock_enabled:
            cache.delete(lock_key)


def _run_sync(feed_url, limit, dialect, fetcher, job) -> FeedSyncResult:
    if job is None:
        job = FeedSyncJob.objects.create(feed_url=feed_url, item_limit=limit)
    job.start()

    add_sync_breadcrumb("sync", "Feed sync started", feed_url=feed_url, extra_data={"limit": limit})

    try:
        parsed = fetch_and_parse(feed_url, dialect=dialect, fetcher=fetcher)
    except FeedError as e:
        logger.error(f"Feed sync aborted, feed unavailable: {e}")
        job.complete(success=False, error_message=str(e))
        capture_sync_error(e, operation="sync", feed_url=feed_url, extra_context={"job_id": str(job.id)})
        raise

    try:
        replace_taxonomy_cache(extract_taxonomy(parsed.items))

        reconciled = reconcile(parsed.items, limit=limit)

        restored = 0
        if getattr(settings, "FEED_SYNC_AUTO_RESTORE", True):
            restored = restore_created_products(reconciled.created_keys)
    except Exception as e:
        logger.exception(f"Feed sync failed for {feed_url}: {e}")
        job.complete(success=False, error_message=str(e))
        capture_sync_error(e, operation="sync", feed_url=feed_url, extra_context={"job_id": str(job.id)})
        raise

    job.items_parsed = parsed.total_items
    job.items_skipped = parsed.skipped
    job.created_count = reconciled.created
    job.updated_count = reconciled.updated
    job.failed_count = reconciled.failed
    job.restored_count = restored
    job.save(
        update_fields=[
            "items_parsed",
            "items_skipped",
            "created_count",
            "updated_count",
            "failed_count",
            "restored_count",
        ]
    )
    job.complete(success=True)

    logger.info(
        f"Feed sync complete: {reconciled.created} created, {reconciled.updated} updated, "
        f"{reconciled.failed} failed, {restored} restored ({feed_url})"
    )

    return FeedSyncResult(
        success=True,
        created=reconciled.created,
        updated=reconciled.updated,
        total_products=reconciled.total,
        failed=reconciled.failed,
        restored=restored,
        skipped=parsed.skipped,
        job_id=str(job.id),
    )


def get_sync_status() -> Dict[str, Any]:
    """
    Catalog-wide sync summary.

    withMarketingData counts products whose marketing record has a sales
    claim or a tier.
    """
    total_products = CatalogProduct.objects.count()
    with_marketing = (
        CatalogProduct.objects.filter(
            Q(marketing__sales_claim__gt="") | Q(marketing__tier__gt="")
        )
        .distinct()
        .count()
    )
    last_sync = CatalogProduct.objects.aggregate(last=Max("last_synced_at"))["last"]

    return {
        "totalProducts": total_products,
        "withMarketingData": with_marketing,
        "lastSync": last_sync.isoformat() if last_sync else None,
    }
