"""
Tests for the catalog management commands.
"""

from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from catalog.exceptions import FeedFetchError
from catalog.models import CatalogProduct, MarketingBackup, ProductMarketing
from tests.factories import FEED_URL


def run(*args, **options):
    out = StringIO()
    call_command(*args, stdout=out, **options)
    return out.getvalue()


@pytest.fixture
def parsed_feed(sample_feed, parse_feed):
    return parse_feed(sample_feed)


@pytest.mark.django_db
class TestSyncFeedCommand:
    """Tests for `manage.py sync_feed`."""

    def test_sync(self, parsed_feed):
        with patch("catalog.services.feed_sync.fetch_and_parse", return_value=parsed_feed):
            output = run("sync_feed", url=FEED_URL)

        assert "Sync complete: 3 created, 0 updated, 0 failed" in output
        assert CatalogProduct.objects.count() == 3

    def test_limit(self, parsed_feed):
        with patch("catalog.services.feed_sync.fetch_and_parse", return_value=parsed_feed):
            run("sync_feed", url=FEED_URL, limit=1)

        assert CatalogProduct.objects.count() == 1

    def test_requires_feed_url(self):
        with pytest.raises(CommandError, match="FEED_SYNC_FEED_URL"):
            run("sync_feed")

    def test_rejects_non_positive_limit(self):
        with pytest.raises(CommandError):
            run("sync_feed", url=FEED_URL, limit=0)

    def test_feed_failure(self):
        error = FeedFetchError("Failed to fetch feed: HTTP 500", feed_url=FEED_URL, status_code=500)

        with patch("catalog.services.feed_sync.fetch_and_parse", side_effect=error):
            with pytest.raises(CommandError, match="Sync failed"):
                run("sync_feed", url=FEED_URL)


@pytest.mark.django_db
class TestCheckOrphansCommand:
    """Tests for `manage.py check_orphans`."""

    def test_lists_without_deleting(self, parsed_feed, make_product):
        make_product("SKU-OLD", name="Discontinued Tea", marketing={"tier": "A"})

        with patch("catalog.services.orphans.fetch_and_parse", return_value=parsed_feed):
            output = run("check_orphans", url=FEED_URL)

        assert "Found 1 orphaned products" in output
        assert "SKU-OLD  Discontinued Tea [marketing]" in output
        assert CatalogProduct.objects.filter(external_id="SKU-OLD").exists()

    def test_no_orphans(self, parsed_feed, make_product):
        make_product("SKU-1")

        with patch("catalog.services.orphans.fetch_and_parse", return_value=parsed_feed):
            output = run("check_orphans", url=FEED_URL)

        assert "No orphaned products" in output

    def test_delete_requires_confirmation(self, make_product):
        make_product("SKU-OLD")

        with pytest.raises(CommandError, match="--yes"):
            run("check_orphans", url=FEED_URL, delete=True)

        assert CatalogProduct.objects.filter(external_id="SKU-OLD").exists()

    def test_delete_with_backup(self, parsed_feed, make_product):
        make_product("SKU-OLD", marketing={"sales_claim": "Keep me"})

        with patch("catalog.services.orphans.fetch_and_parse", return_value=parsed_feed):
            output = run("check_orphans", url=FEED_URL, delete=True, yes=True)

        assert "Deleted 1 products, backed up 1 marketing records" in output
        assert not CatalogProduct.objects.filter(external_id="SKU-OLD").exists()
        assert MarketingBackup.objects.get(sku="SKU-OLD").sales_claim == "Keep me"


@pytest.mark.django_db
class TestRestoreBackupCommand:
    """Tests for `manage.py restore_backup`."""

    def test_restore(self, make_product):
        product = make_product("SKU-1")
        MarketingBackup.objects.create(sku="SKU-1", sales_claim="back")

        output = run("restore_backup", str(product.id), "SKU-1")

        assert "Restored SKU-1" in output
        assert ProductMarketing.objects.get(product=product).sales_claim == "back"

    def test_no_backup(self, make_product):
        product = make_product("SKU-1")

        output = run("restore_backup", str(product.id), "SKU-404")

        assert "No backup found for SKU: SKU-404" in output

    def test_requires_arguments(self):
        with pytest.raises(CommandError):
            run("restore_backup")

    def test_restore_all(self, make_product):
        make_product("SKU-1")
        MarketingBackup.objects.create(sku="SKU-1", sales_claim="back")
        MarketingBackup.objects.create(sku="SKU-2", sales_claim="gone")

        output = run("restore_backup", all=True)

        assert "Restored 1 products" in output
        assert "SKU-2" in output
