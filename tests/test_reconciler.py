"""
Tests for the feed reconciler.

Covers idempotence, field ownership, limit enforcement, the duplicate key
policy and per-record failure isolation.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from catalog.feeds.parser import FeedItem
from catalog.models import CatalogProduct, ProductMarketing
from catalog.services.reconciler import reconcile


def item(sku, name=None, **fields):
    return FeedItem(external_id=sku, name=name or f"Product {sku}", **fields)


@pytest.mark.django_db
class TestReconcile:
    """Tests for reconcile()."""

    def test_creates_missing_products(self):
        result = reconcile([
            item("SKU-1", price=Decimal("89.00"), feed_category="Teas"),
            item("SKU-2"),
        ])

        assert result.created == 2
        assert result.updated == 0
        assert result.total == 2
        assert result.failed == 0
        assert result.created_keys == ["SKU-1", "SKU-2"]

        product = CatalogProduct.objects.get(external_id="SKU-1")
        assert product.price == Decimal("89.00")
        assert product.feed_category == "Teas"
        assert product.last_synced_at is not None

    def test_created_products_have_no_marketing(self):
        reconcile([item("SKU-1")])

        assert ProductMarketing.objects.count() == 0

    def test_second_run_is_idempotent(self):
        items = [item("SKU-1"), item("SKU-2"), item("SKU-3")]
        reconcile(items)

        result = reconcile(items)

        assert result.created == 0
        assert result.updated == 3
        assert result.total == 3
        assert CatalogProduct.objects.count() == 3

    def test_updates_feed_owned_fields(self, make_product):
        make_product("SKU-1", name="Old name", brand="Old brand")

        reconcile([item("SKU-1", name="New name", brand="Herbalia", price=Decimal("10.00"))])

        product = CatalogProduct.objects.get(external_id="SKU-1")
        assert product.name == "New name"
        assert product.brand == "Herbalia"
        assert product.price == Decimal("10.00")

    def test_marketing_content_untouched(self, make_product):
        product = make_product(
            "SKU-1",
            marketing={
                "sales_claim": "Best chamomile",
                "tier": "A",
                "is_top": True,
                "top_order": 2,
                "hashtags": ["#tea"],
            },
        )
        before = ProductMarketing.objects.get(product=product).marketing_values()

        reconcile([item("SKU-1", name="Renamed")])

        after = ProductMarketing.objects.get(product=product).marketing_values()
        assert after == before
        assert CatalogProduct.objects.get(pk=product.pk).name == "Renamed"

    def test_limit_caps_processed_items(self):
        items = [item(f"SKU-{i}") for i in range(5)]

        result = reconcile(items, limit=2)

        assert result.total == 2
        assert result.created == 2
        assert set(CatalogProduct.objects.values_list("external_id", flat=True)) == {"SKU-0", "SKU-1"}

    def test_duplicate_key_last_occurrence_wins(self):
        result = reconcile([item("SKU-1", name="First"), item("SKU-1", name="Second")])

        assert result.created == 1
        assert result.updated == 1
        assert result.total == 2
        assert CatalogProduct.objects.get(external_id="SKU-1").name == "Second"

    def test_failed_record_does_not_stop_the_pass(self):
        items = [item("SKU-1"), item("SKU-2"), item("SKU-3")]

        with patch(
            "catalog.services.reconciler._upsert",
            side_effect=[True, DatabaseError("disk full"), True],
        ):
            result = reconcile(items)

        assert result.total == 3
        assert result.failed == 1
        assert result.created == 2
        assert result.created_keys == ["SKU-1", "SKU-3"]
        assert result.created + result.updated + result.failed == result.total

    def test_constraint_violation_rolls_back_only_that_record(self):
        items = [item("SKU-1"), FeedItem(external_id="SKU-2", name=None), item("SKU-3")]

        result = reconcile(items)

        assert result.failed == 1
        assert result.created == 2
        assert set(CatalogProduct.objects.values_list("external_id", flat=True)) == {"SKU-1", "SKU-3"}

    def test_empty_pull(self):
        result = reconcile([])

        assert result.total == 0
        assert result.created == 0
