"""
Orphan Detector.

Lists catalog products whose identity key no longer appears in the feed.
Read-only: deletion is a separate, explicitly confirmed step (see purge).
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from catalog.feeds.fetcher import FeedFetcher, fetch_and_parse
from catalog.models import CatalogProduct

logger = logging.getLogger(__name__)


@dataclass
class OrphanCandidate:
    """A catalog product absent from the current feed."""

    id: str
    identity_key: str
    name: str
    has_marketing_data: bool = False


@dataclass
class OrphanReport:
    """
    Result of an orphan check.

    Attributes:
        feed_skus_count: Distinct identity keys in the feed pull
        orphans: Products with a key not present in the pull
    """

    feed_skus_count: int = 0
    orphans: List[OrphanCandidate] = field(default_factory=list)


def detect_orphans(feed_keys: Set[str]) -> List[OrphanCandidate]:
    """
    Compare the catalog against a set of feed identity keys.

    Products without an identity key are never reported.
    """
    products = (
        CatalogProduct.objects.exclude(external_id__isnull=True)
        .exclude(external_id="")
        .exclude(external_id__in=feed_keys)
        .select_related("marketing")
        .order_by("name")
    )

    return [
        OrphanCandidate(
            id=str(product.id),
            identity_key=product.external_id,
            name=product.name,
            has_marketing_data=product.has_marketing_data,
        )
        for product in products
    ]


def find_orphans(
    feed_url: str,
    dialect: Optional[str] = None,
    fetcher: Optional[FeedFetcher] = None,
) -> OrphanReport:
    """
    Fetch the feed and report catalog products missing from it.

    The feed is always re-fetched; a cached pull is never reused.

    Raises:
        FeedFetchError: If the feed is unreachable
        FeedParseError: If the document cannot be parsed
    """
    parsed = fetch_and_parse(feed_url, dialect=dialect, fetcher=fetcher)
    feed_keys = parsed.identity_keys

    orphans = detect_orphans(feed_keys)

    logger.info(
        f"Orphan check: {len(orphans)} orphaned products against "
        f"{len(feed_keys)} feed SKUs ({feed_url})"
    )
    return OrphanReport(feed_skus_count=len(feed_keys), orphans=orphans)
