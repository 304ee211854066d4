"""
Feed Reconciler.

Upserts feed items into the catalog by identity key (external_id).

- Missing key in the catalog: a product is created with feed-owned fields only.
- Existing key: only feed-owned fields are overwritten; marketing content
  (ProductMarketing, gallery) is never read or written here.

Records are processed one at a time, each inside its own savepoint, so a
failing record is counted and the pass continues with the next one.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from django.db import DatabaseError, transaction

from catalog.feeds.parser import FeedItem
from catalog.models import CatalogProduct, FeedFields

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """
    Outcome of one reconcile pass.

    Attributes:
        created: Products inserted
        updated: Products whose feed-owned fields were overwritten
        total: Valid items taken for processing (after the limit)
        failed: Items whose write raised a database error
        created_keys: Identity keys of the inserted products, in feed order
    """

    created: int = 0
    updated: int = 0
    total: int = 0
    failed: int = 0
    created_keys: List[str] = field(default_factory=list)


def feed_fields_from_item(item: FeedItem) -> FeedFields:
    """Project a parsed feed item onto the feed-owned field group."""
    return FeedFields(
        external_id=item.external_id,
        name=item.name,
        description=item.description,
        image=item.image,
        price=item.price,
        product_url=item.product_url,
        availability=item.availability,
        brand=item.brand,
        gtin=item.gtin,
        product_type=item.product_type,
        feed_category=item.feed_category,
        feed_subcategory=item.feed_subcategory,
    )


def reconcile(items: Iterable[FeedItem], limit: Optional[int] = None) -> ReconcileResult:
    """
    Upsert feed items into the catalog.

    Args:
        items: Parsed feed items in feed order
        limit: Process at most this many items (None = all)

    Returns:
        ReconcileResult with created + updated + failed == total
    """
    items = list(items)
    if limit is not None:
        items = items[: max(limit, 0)]

    result = ReconcileResult(total=len(items))

    for item in items:
        feed_fields = feed_fields_from_item(item)
        try:
            with transaction.atomic():
                created = _upsert(feed_fields)
        except DatabaseError as e:
            result.failed += 1
            logger.error(f"Failed to reconcile product {feed_fields.external_id}: {e}")
            continue

        if created:
            result.created += 1
            result.created_keys.append(feed_fields.external_id)
        else:
            result.updated += 1

    logger.info(
        f"Reconcile complete: {result.created} created, {result.updated} updated, "
        f"{result.failed} failed of {result.total}"
    )
    return result


def _upsert(feed_fields: FeedFields) -> bool:
    """
    Write one record. Returns True if a product was created.
    """
    product = (
        CatalogProduct.objects.select_for_update()
        .filter(external_id=feed_fields.external_id)
        .first()
    )

    if product is None:
        CatalogProduct.from_feed_fields(feed_fields).save()
        logger.debug(f"Created product {feed_fields.external_id}")
        return True

    product.apply_feed_fields(feed_fields)
    logger.debug(f"Updated product {feed_fields.external_id}")
    return False
