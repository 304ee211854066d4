"""
Tests for the orphan detector.
"""

import pytest

from catalog.exceptions import FeedFetchError
from catalog.models import CatalogProduct
from catalog.services.orphans import detect_orphans, find_orphans
from tests.factories import FEED_URL, luigisbox_feed, luigisbox_item


@pytest.mark.django_db
class TestDetectOrphans:
    """Tests for comparing the catalog with a key set."""

    def test_product_missing_from_feed_is_orphan(self, make_product):
        make_product("SKU-1")
        gone = make_product("SKU-9", name="Discontinued tea")

        orphans = detect_orphans({"SKU-1"})

        assert len(orphans) == 1
        assert orphans[0].id == str(gone.id)
        assert orphans[0].identity_key == "SKU-9"
        assert orphans[0].name == "Discontinued tea"

    def test_products_without_key_are_never_orphans(self, make_product):
        make_product(None, name="Hand-made bundle")
        make_product("", name="Draft product")

        assert detect_orphans({"SKU-1"}) == []

    def test_marketing_flag(self, make_product):
        make_product("SKU-7", marketing={"sales_claim": "Calms the mind"})
        make_product("SKU-8", marketing={})
        make_product("SKU-9")

        orphans = {o.identity_key: o for o in detect_orphans(set())}

        assert orphans["SKU-7"].has_marketing_data is True
        assert orphans["SKU-8"].has_marketing_data is False
        assert orphans["SKU-9"].has_marketing_data is False

    def test_empty_feed_makes_every_keyed_product_an_orphan(self, make_product):
        make_product("SKU-1")
        make_product("SKU-2")

        assert len(detect_orphans(set())) == 2


@pytest.mark.django_db
class TestFindOrphans:
    """Tests for the fetch-and-compare orphan check."""

    def test_report(self, make_product, make_fetcher):
        make_product("SKU-1")
        make_product("SKU-2")
        content = luigisbox_feed(
            luigisbox_item("SKU-1", "Chamomile Tea"),
            luigisbox_item("SKU-1", "Chamomile Tea (dup)"),
            luigisbox_item("SKU-3", "New tea"),
        )

        report = find_orphans(FEED_URL, fetcher=make_fetcher(content))

        assert report.feed_skus_count == 2
        assert [o.identity_key for o in report.orphans] == ["SKU-2"]

    def test_read_only(self, make_product, make_fetcher):
        make_product("SKU-2")

        find_orphans(FEED_URL, fetcher=make_fetcher(luigisbox_feed()))

        assert CatalogProduct.objects.filter(external_id="SKU-2").exists()

    def test_fetch_failure_propagates(self, make_product, make_fetcher):
        make_product("SKU-2")

        with pytest.raises(FeedFetchError):
            find_orphans(FEED_URL, fetcher=make_fetcher(b"", status_code=500))
