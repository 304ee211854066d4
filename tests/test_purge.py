"""
Tests for backup & purge.
"""

import uuid
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from catalog.exceptions import InvalidConfirmationError
from catalog.models import (
    CatalogProduct,
    GalleryBackup,
    GalleryImage,
    MarketingBackup,
    ProductMarketing,
)
from catalog.services.purge import purge


MARKETING = {
    "sales_claim": "Calms the mind",
    "tier": "A",
    "is_top": True,
    "top_order": 3,
    "why_buy": [{"icon": "leaf", "text": "Organic"}],
}


@pytest.mark.django_db
class TestPurge:
    """Tests for purge()."""

    def test_empty_selection_rejected(self):
        with pytest.raises(InvalidConfirmationError):
            purge([])

        with pytest.raises(InvalidConfirmationError):
            purge(None)

    def test_backs_up_then_deletes(self, make_product, make_image):
        product = make_product("SKU-1", name="Chamomile Tea", marketing=MARKETING)
        make_image(product, "gallery/a.jpg")
        make_image(product, "gallery/b.jpg", tags=["banner"])

        result = purge([product.id])

        assert result.deleted == 1
        assert result.backed_up == 1
        assert result.gallery_backed_up == 2
        assert result.failed == 0

        assert not CatalogProduct.objects.filter(pk=product.pk).exists()
        assert ProductMarketing.objects.count() == 0
        assert GalleryImage.objects.count() == 0

        backup = MarketingBackup.objects.get(sku="SKU-1")
        assert backup.original_product_name == "Chamomile Tea"
        assert backup.sales_claim == "Calms the mind"
        assert backup.tier == "A"
        assert backup.is_top is True
        assert backup.top_order == 3
        assert backup.why_buy == [{"icon": "leaf", "text": "Organic"}]

        gallery = {g.storage_key: g for g in GalleryBackup.objects.filter(sku="SKU-1")}
        assert set(gallery) == {"gallery/a.jpg", "gallery/b.jpg"}
        assert gallery["gallery/b.jpg"].tags == ["banner"]

    def test_product_without_marketing_not_backed_up(self, make_product):
        product = make_product("SKU-1")

        result = purge([str(product.id)])

        assert result.deleted == 1
        assert result.backed_up == 0
        assert MarketingBackup.objects.count() == 0

    def test_missing_products_skipped(self, make_product):
        product = make_product("SKU-1")

        result = purge([uuid.uuid4(), product.id])

        assert result.deleted == 1
        assert result.failed == 0

    def test_product_without_key_deleted_without_backup(self, make_product, make_image):
        product = make_product(None, name="Bundle", marketing=MARKETING)
        make_image(product, "gallery/bundle.jpg")

        result = purge([product.id])

        assert result.deleted == 1
        assert result.backed_up == 0
        assert result.gallery_backed_up == 0
        assert GalleryBackup.objects.count() == 0

    def test_backup_history_is_appended(self, make_product):
        first = make_product("SKU-1", marketing={"sales_claim": "v1"})
        purge([first.id])
        second = make_product("SKU-1", marketing={"sales_claim": "v2"})
        purge([second.id])

        claims = list(
            MarketingBackup.objects.filter(sku="SKU-1")
            .order_by("backed_up_at")
            .values_list("sales_claim", flat=True)
        )
        assert claims == ["v1", "v2"]

    def test_gallery_backup_not_duplicated(self, make_product, make_image):
        first = make_product("SKU-1")
        make_image(first, "gallery/a.jpg")
        purge([first.id])

        second = make_product("SKU-1")
        make_image(second, "gallery/a.jpg")
        result = purge([second.id])

        assert result.gallery_backed_up == 0
        assert GalleryBackup.objects.filter(sku="SKU-1").count() == 1

    def test_failed_delete_rolls_back_backup(self, make_product):
        product = make_product("SKU-1", marketing=MARKETING)

        with patch.object(CatalogProduct, "delete", side_effect=DatabaseError("locked")):
            result = purge([product.id])

        assert result.failed == 1
        assert result.deleted == 0
        assert MarketingBackup.objects.count() == 0
        assert CatalogProduct.objects.filter(pk=product.pk).exists()

    def test_failure_does_not_stop_other_products(self, make_product):
        first = make_product("SKU-1")
        second = make_product("SKU-2")
        original_delete = CatalogProduct.delete

        def flaky_delete(self, *args, **kwargs):
            if self.external_id == "SKU-1":
                raise DatabaseError("locked")
            return original_delete(self, *args, **kwargs)

        with patch.object(CatalogProduct, "delete", flaky_delete):
            result = purge([first.id, second.id])

        assert result.failed == 1
        assert result.deleted == 1
        assert not CatalogProduct.objects.filter(pk=second.pk).exists()

    def test_malformed_id_rejects_whole_selection(self, make_product):
        first = make_product("SKU-1", marketing=MARKETING)
        second = make_product("SKU-2")

        with pytest.raises(InvalidConfirmationError, match="not-a-uuid"):
            purge([first.id, "not-a-uuid", second.id])

        assert CatalogProduct.objects.filter(pk__in=[first.pk, second.pk]).count() == 2
        assert MarketingBackup.objects.count() == 0
