"""
Tests for the feed sync orchestration.

Covers the end-to-end sync (fetch, taxonomy, reconcile, auto-restore, job
tracking), fail-closed behaviour, the optional sync lock, the Celery task
and the catalog sync status.
"""

from unittest.mock import patch

import pytest
from django.core.cache import cache
from django.db import DatabaseError

from catalog.exceptions import FeedFetchError, FeedParseError, SyncInProgressError
from catalog.models import (
    CatalogProduct,
    FeedSyncJob,
    FeedTaxonomy,
    GalleryBackup,
    GalleryImage,
    MarketingBackup,
    ProductMarketing,
    SyncJobStatus,
)
from catalog.services.feed_sync import _lock_key, get_sync_status, sync_from_feed
from catalog.tasks import sync_feed as sync_feed_task
from tests.factories import FEED_URL


@pytest.mark.django_db
class TestSyncFromFeed:
    """Tests for sync_from_feed()."""

    def test_full_sync(self, sample_feed, make_fetcher):
        result = sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert result.success is True
        assert result.created == 3
        assert result.updated == 0
        assert result.total_products == 3
        assert result.failed == 0
        assert CatalogProduct.objects.count() == 3

    def test_second_sync_only_updates(self, sample_feed, make_fetcher):
        sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        result = sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert result.created == 0
        assert result.updated == 3
        assert CatalogProduct.objects.count() == 3

    def test_marketing_untouched_by_sync(self, sample_feed, make_fetcher, make_product):
        product = make_product("SKU-1", name="Stale name", marketing={"sales_claim": "Keep"})

        sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        product.refresh_from_db()
        assert product.name == "Chamomile Tea"
        assert product.marketing.sales_claim == "Keep"

    def test_job_is_recorded(self, sample_feed, make_fetcher):
        result = sync_from_feed(FEED_URL, limit=2, fetcher=make_fetcher(sample_feed))

        job = FeedSyncJob.objects.get(id=result.job_id)
        assert job.status == SyncJobStatus.COMPLETED
        assert job.feed_url == FEED_URL
        assert job.item_limit == 2
        assert job.items_parsed == 3
        assert job.created_count == 2
        assert job.started_at is not None
        assert job.completed_at is not None

    def test_limit_applies_to_reconcile_not_taxonomy(self, sample_feed, make_fetcher):
        result = sync_from_feed(FEED_URL, limit=1, fetcher=make_fetcher(sample_feed))

        assert result.total_products == 1
        assert CatalogProduct.objects.count() == 1
        assert set(FeedTaxonomy.objects.values_list("category", flat=True)) == {"Teas", "Supplements"}

    def test_taxonomy_cache_rebuilt(self, sample_feed, make_fetcher):
        FeedTaxonomy.objects.create(category="Discontinued", subcategories=[])

        sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert FeedTaxonomy.objects.get(category="Teas").subcategories == ["Herbal teas"]
        assert not FeedTaxonomy.objects.filter(category="Discontinued").exists()

    def test_fetch_failure_aborts_before_mutation(self, make_fetcher, make_product):
        product = make_product("SKU-1", name="Untouched")
        FeedTaxonomy.objects.create(category="Teas", subcategories=["Herbal teas"])

        with patch("catalog.services.feed_sync.capture_sync_error") as mock_capture:
            with pytest.raises(FeedFetchError):
                sync_from_feed(FEED_URL, fetcher=make_fetcher(b"", status_code=503))

        mock_capture.assert_called_once()
        product.refresh_from_db()
        assert product.name == "Untouched"
        assert FeedTaxonomy.objects.filter(category="Teas").exists()

        job = FeedSyncJob.objects.get()
        assert job.status == SyncJobStatus.FAILED
        assert "503" in job.error_message

    def test_unparseable_feed_aborts(self, make_fetcher):
        with pytest.raises(FeedParseError):
            sync_from_feed(FEED_URL, fetcher=make_fetcher(b"<html>Maintenance"))

        assert CatalogProduct.objects.count() == 0
        assert FeedSyncJob.objects.get().status == SyncJobStatus.FAILED

    def test_reappeared_product_gets_backup_restored(self, sample_feed, make_fetcher):
        MarketingBackup.objects.create(sku="SKU-2", sales_claim="Cooling mint", tier="A")

        result = sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert result.restored == 1
        product = CatalogProduct.objects.get(external_id="SKU-2")
        assert product.marketing.sales_claim == "Cooling mint"
        assert FeedSyncJob.objects.get(id=result.job_id).restored_count == 1

    def test_existing_products_are_not_auto_restored(self, sample_feed, make_fetcher, make_product):
        product = make_product("SKU-2", marketing={"sales_claim": "Current"})
        MarketingBackup.objects.create(sku="SKU-2", sales_claim="Old backup")

        result = sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert result.restored == 0
        assert ProductMarketing.objects.get(product=product).sales_claim == "Current"

    def test_failed_auto_restore_does_not_fail_sync(self, sample_feed, make_fetcher):
        MarketingBackup.objects.create(sku="SKU-1", sales_claim="Calming")
        GalleryBackup.objects.create(
            sku="SKU-1", storage_key="gallery/a.jpg", filename="a.jpg", content_type="image/jpeg"
        )
        MarketingBackup.objects.create(sku="SKU-2", sales_claim="Cooling mint")

        with patch.object(GalleryImage.objects, "create", side_effect=DatabaseError("disk full")):
            result = sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert result.success is True
        assert result.created == 3
        assert result.restored == 1
        assert CatalogProduct.objects.get(external_id="SKU-2").marketing.sales_claim == "Cooling mint"
        assert not ProductMarketing.objects.filter(product__external_id="SKU-1").exists()
        assert FeedSyncJob.objects.get(id=result.job_id).status == SyncJobStatus.COMPLETED

    def test_auto_restore_can_be_disabled(self, settings, sample_feed, make_fetcher):
        settings.FEED_SYNC_AUTO_RESTORE = False
        MarketingBackup.objects.create(sku="SKU-2", sales_claim="Cooling mint")

        result = sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert result.restored == 0
        assert ProductMarketing.objects.count() == 0


@pytest.mark.django_db
class TestSyncLock:
    """Tests for the optional single-writer lock."""

    def test_held_lock_refuses_sync(self, settings, sample_feed, make_fetcher):
        settings.FEED_SYNC_LOCK_ENABLED = True
        cache.add(_lock_key(FEED_URL), "locked", 60)

        with pytest.raises(SyncInProgressError):
            sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert CatalogProduct.objects.count() == 0

    def test_lock_released_after_sync(self, settings, sample_feed, make_fetcher):
        settings.FEED_SYNC_LOCK_ENABLED = True

        sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert cache.get(_lock_key(FEED_URL)) is None

    def test_lock_released_after_failure(self, settings, make_fetcher):
        settings.FEED_SYNC_LOCK_ENABLED = True

        with pytest.raises(FeedFetchError):
            sync_from_feed(FEED_URL, fetcher=make_fetcher(b"", status_code=500))

        assert cache.get(_lock_key(FEED_URL)) is None

    def test_lock_disabled_by_default(self, sample_feed, make_fetcher):
        cache.add(_lock_key(FEED_URL), "locked", 60)

        result = sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        assert result.created == 3


@pytest.mark.django_db
class TestSyncTask:
    """Tests for the Celery sync task."""

    def test_task_runs_sync_on_existing_job(self, sample_feed, parse_feed):
        job = FeedSyncJob.objects.create(feed_url=FEED_URL)

        with patch(
            "catalog.services.feed_sync.fetch_and_parse",
            return_value=parse_feed(sample_feed),
        ):
            outcome = sync_feed_task.apply(args=[FEED_URL, None, str(job.id)]).get()

        assert outcome["status"] == "completed"
        assert outcome["created"] == 3
        job.refresh_from_db()
        assert job.status == SyncJobStatus.COMPLETED

    def test_task_reports_feed_failure(self):
        job = FeedSyncJob.objects.create(feed_url=FEED_URL)

        with patch(
            "catalog.services.feed_sync.fetch_and_parse",
            side_effect=FeedFetchError("HTTP 500", feed_url=FEED_URL, status_code=500),
        ):
            outcome = sync_feed_task.apply(args=[FEED_URL, None, str(job.id)]).get()

        assert outcome["status"] == "failed"
        job.refresh_from_db()
        assert job.status == SyncJobStatus.FAILED

    def test_task_with_unknown_job(self):
        outcome = sync_feed_task.apply(
            args=[FEED_URL, None, "00000000-0000-0000-0000-000000000000"]
        ).get()

        assert outcome["status"] == "failed"


@pytest.mark.django_db
class TestSyncStatus:
    """Tests for get_sync_status()."""

    def test_empty_catalog(self):
        assert get_sync_status() == {
            "totalProducts": 0,
            "withMarketingData": 0,
            "lastSync": None,
        }

    def test_counts(self, sample_feed, make_fetcher, make_product):
        make_product("LOCAL-1", marketing={"sales_claim": "Claim"})
        make_product("LOCAL-2", marketing={"tier": "B"})
        make_product("LOCAL-3", marketing={"hashtags": ["#only"]})
        sync_from_feed(FEED_URL, fetcher=make_fetcher(sample_feed))

        status = get_sync_status()

        assert status["totalProducts"] == 6
        assert status["withMarketingData"] == 2
        assert status["lastSync"] is not None
