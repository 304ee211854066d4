"""
Restore Service.

Reapplies backed-up marketing content and gallery references, keyed by
identity key, onto a live product. Used manually by operators and
automatically by the sync when a previously deleted product reappears.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from catalog.exceptions import InvalidConfirmationError
from catalog.models import (
    CatalogProduct,
    GalleryBackup,
    GalleryImage,
    MarketingBackup,
    ProductMarketing,
    is_empty_value,
)

logger = logging.getLogger(__name__)

RESTORED_MARKER = "restored_from_backup"


@dataclass
class RestoreResult:
    """
    Outcome of a restore.

    Attributes:
        restored: True if a backup was applied
        reason: Why nothing was restored (empty on success)
        media_count: Gallery rows re-created on the target
    """

    restored: bool = False
    reason: str = ""
    media_count: int = 0


def restore(target_product_id, backup_key: str) -> RestoreResult:
    """
    Apply the newest backup for backup_key onto the target product.

    Non-empty backup fields overwrite the target's marketing content; empty
    backup fields leave the target unchanged. Every gallery backup under the
    key becomes a new gallery row on the target. Backup rows are kept, so
    repeating a restore duplicates the gallery rows.

    Raises:
        InvalidConfirmationError: If the target id or key is missing, or the
            target product does not exist
    """
    backup_key = (backup_key or "").strip()
    if not target_product_id or not backup_key:
        raise InvalidConfirmationError("Both a target product and a SKU are required")

    with transaction.atomic():
        try:
            product = CatalogProduct.objects.select_for_update().get(pk=target_product_id)
        except (CatalogProduct.DoesNotExist, ValidationError, ValueError):
            raise InvalidConfirmationError(f"Product not found: {target_product_id}")

        backup = (
            MarketingBackup.objects.filter(sku=backup_key)
            .order_by("-backed_up_at")
            .first()
        )
        if backup is None:
            return RestoreResult(restored=False, reason=f"No backup found for SKU: {backup_key}")

        marketing, _ = ProductMarketing.objects.get_or_create(product=product)
        for name, value in backup.marketing_values().items():
            if not is_empty_value(value):
                setattr(marketing, name, value)
        marketing.marketing_last_updated = timezone.now()
        marketing.last_updated_field = RESTORED_MARKER
        marketing.save()

        media_count = 0
        for gallery_backup in GalleryBackup.objects.filter(sku=backup_key).order_by("backed_up_at"):
            GalleryImage.objects.create(
                product=product,
                storage_key=gallery_backup.storage_key,
                filename=gallery_backup.filename,
                content_type=gallery_backup.content_type,
                size=gallery_backup.size,
                tags=list(gallery_backup.tags or []),
            )
            media_count += 1

    logger.info(
        f"Restored backup {backup_key} onto product {product.id} "
        f"({media_count} gallery images)"
    )
    return RestoreResult(restored=True, media_count=media_count)


def restore_created_products(created_keys: Iterable[str]) -> int:
    """
    Restore backups onto freshly created products that have one.

    Returns:
        Number of products restored
    """
    created_keys = [key for key in created_keys if key]
    if not created_keys:
        return 0

    keys_with_backup = set(
        MarketingBackup.objects.filter(sku__in=created_keys)
        .values_list("sku", flat=True)
        .distinct()
    )
    if not keys_with_backup:
        return 0

    products = CatalogProduct.objects.filter(external_id__in=keys_with_backup)

    restored = 0
    failed = 0
    for product in products:
        try:
            result = restore(product.id, product.external_id)
        except DatabaseError as e:
            failed += 1
            logger.error(f"Failed to auto-restore backup for {product.external_id}: {e}")
            continue
        if result.restored:
            restored += 1

    logger.info(
        f"Auto-restored marketing content for {restored} reappeared products "
        f"({failed} failed)"
    )
    return restored


def restore_all_backups() -> Dict[str, List[str]]:
    """
    Restore every backed-up SKU that has a live product with the same key.

    Returns:
        {"restored": [...], "not_found": [...]} lists of SKUs
    """
    restored = []
    not_found = []

    skus = (
        MarketingBackup.objects.order_by("sku")
        .values_list("sku", flat=True)
        .distinct()
    )

    for sku in skus:
        product = CatalogProduct.objects.filter(external_id=sku).first()
        if product is None:
            not_found.append(sku)
            continue

        result = restore(product.id, sku)
        if result.restored:
            restored.append(sku)

    logger.info(f"Restore all: {len(restored)} restored, {len(not_found)} without product")
    return {"restored": restored, "not_found": not_found}
