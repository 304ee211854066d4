"""
Feed Taxonomy Service.

Derives the category/subcategory vocabulary of a feed pull and keeps the
small FeedTaxonomy cache table in step with it for catalog filters.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from django.db import transaction
from django.utils import timezone

from catalog.feeds.parser import FeedItem
from catalog.models import CatalogProduct, FeedTaxonomy

logger = logging.getLogger(__name__)


@dataclass
class Taxonomy:
    """
    Category vocabulary of one feed pull.

    Attributes:
        categories: Sorted main categories
        subcategories: Main category -> sorted, deduplicated subcategories
    """

    categories: List[str] = field(default_factory=list)
    subcategories: Dict[str, List[str]] = field(default_factory=dict)


def extract_taxonomy(items: Iterable[FeedItem]) -> Taxonomy:
    """
    Build the category vocabulary present in a feed pull.

    Pure function of the items; catalog state is not consulted.
    """
    collected: Dict[str, set] = {}

    for item in items:
        if not item.feed_category:
            continue
        subs = collected.setdefault(item.feed_category, set())
        if item.feed_subcategory:
            subs.add(item.feed_subcategory)

    return Taxonomy(
        categories=sorted(collected),
        subcategories={category: sorted(subs) for category, subs in collected.items()},
    )


def replace_taxonomy_cache(taxonomy: Taxonomy) -> int:
    """
    Replace the FeedTaxonomy cache with the given vocabulary.

    Categories present are upserted with their exact subcategory list;
    categories absent from the pull are removed.

    Returns:
        Number of category rows written
    """
    now = timezone.now()

    with transaction.atomic():
        removed, _ = FeedTaxonomy.objects.exclude(
            category__in=taxonomy.categories
        ).delete()

        for category in taxonomy.categories:
            FeedTaxonomy.objects.update_or_create(
                category=category,
                defaults={
                    "subcategories": taxonomy.subcategories.get(category, []),
                    "updated_at": now,
                },
            )

    logger.info(
        f"Taxonomy cache updated: {len(taxonomy.categories)} categories, {removed} removed"
    )
    return len(taxonomy.categories)


def get_feed_taxonomy() -> Dict[str, Any]:
    """
    Read the cached taxonomy for filter UIs.

    Returned as a list of {category, subcategories} rows rather than a
    mapping keyed by category name, since names may contain any characters.
    """
    rows = list(FeedTaxonomy.objects.order_by("category"))

    return {
        "categories": [row.category for row in rows if row.category],
        "subcategoryData": [
            {
                "category": row.category,
                "subcategories": sorted(sub for sub in (row.subcategories or []) if sub),
            }
            for row in rows
        ],
    }


def get_feed_brands() -> List[str]:
    """Sorted distinct brands of live catalog products."""
    brands = (
        CatalogProduct.objects.exclude(brand="")
        .values_list("brand", flat=True)
        .distinct()
    )
    return sorted(set(brands))
