"""
Backup & Purge Service.

Deletes operator-confirmed products, writing a backup of their marketing
content and gallery references first so the content can later be restored
onto a product that reappears under the same identity key.

Each product is handled in its own transaction: the backup rows and the
delete commit together or not at all.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable, List

from django.db import DatabaseError, transaction

from catalog.exceptions import InvalidConfirmationError
from catalog.models import CatalogProduct, GalleryBackup, MarketingBackup

logger = logging.getLogger(__name__)


@dataclass
class PurgeResult:
    """
    Outcome of a purge.

    Attributes:
        deleted: Products deleted
        backed_up: Marketing backups written
        gallery_backed_up: Gallery backup rows written
        failed: Products whose backup or delete raised an error
    """

    deleted: int = 0
    backed_up: int = 0
    gallery_backed_up: int = 0
    failed: int = 0


def purge(product_ids: Iterable) -> PurgeResult:
    """
    Back up and delete the given products.

    Args:
        product_ids: Explicit, operator-confirmed product ids

    Returns:
        PurgeResult with counts

    Raises:
        InvalidConfirmationError: If no ids were supplied or any id is
            malformed; nothing is deleted in that case
    """
    product_ids = _validate_ids(product_ids)

    result = PurgeResult()

    for product_id in product_ids:
        try:
            with transaction.atomic():
                outcome = _purge_one(product_id)
        except DatabaseError as e:
            result.failed += 1
            logger.error(f"Failed to purge product {product_id}: {e}")
            continue

        if outcome is None:
            continue

        backed_up, gallery_backed_up = outcome
        result.deleted += 1
        result.backed_up += backed_up
        result.gallery_backed_up += gallery_backed_up

    logger.info(
        f"Purge complete: {result.deleted} deleted, {result.backed_up} backed up, "
        f"{result.gallery_backed_up} gallery backups, {result.failed} failed"
    )
    return result


def _validate_ids(product_ids) -> List[uuid.UUID]:
    """Coerce the confirmed ids to UUIDs, rejecting the whole selection on a bad one."""
    valid = []
    for product_id in product_ids or []:
        if not product_id:
            continue
        try:
            valid.append(uuid.UUID(str(product_id)))
        except ValueError:
            raise InvalidConfirmationError(f"Invalid product id: {product_id}")

    if not valid:
        raise InvalidConfirmationError("No product ids supplied for deletion")
    return valid


def _purge_one(product_id):
    """
    Back up and delete one product inside the caller's transaction.

    Returns:
        (marketing backups written, gallery backups written), or None if
        the product does not exist
    """
    product = (
        CatalogProduct.objects.select_for_update()
        .filter(pk=product_id)
        .first()
    )
    if product is None:
        logger.info(f"Product {product_id} not found, skipping")
        return None

    sku = product.external_id
    backed_up = 0
    gallery_backed_up = 0

    if not sku:
        logger.warning(
            f"Product {product_id} ({product.name}) has no identity key; "
            f"deleting without backup"
        )
    else:
        marketing = product.get_marketing()
        if marketing is not None and marketing.has_marketing_data():
            MarketingBackup.objects.create(
                sku=sku,
                original_product_name=product.name,
                **marketing.marketing_values(),
            )
            backed_up = 1

        for image in product.gallery_images.all():
            _, created = GalleryBackup.objects.get_or_create(
                sku=sku,
                storage_key=image.storage_key,
                defaults={
                    "filename": image.filename,
                    "content_type": image.content_type,
                    "size": image.size,
                    "tags": image.tags,
                },
            )
            if created:
                gallery_backed_up += 1

    product.delete()
    logger.debug(
        f"Deleted product {product_id} (sku={sku}, backups={backed_up}, "
        f"gallery={gallery_backed_up})"
    )
    return backed_up, gallery_backed_up
