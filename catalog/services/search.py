"""
Product name search used by operators to pick a restore target.

Case-insensitive substring matches come first; remaining slots are filled
with fuzzy matches so small typos and word-order differences still find the
product.
"""

import logging
from typing import Any, Dict, List

from rapidfuzz import fuzz

from catalog.models import CatalogProduct

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
FUZZY_SCORE_CUTOFF = 70


def _serialize(product: CatalogProduct) -> Dict[str, Any]:
    marketing = product.get_marketing()
    return {
        "id": str(product.id),
        "name": product.name,
        "externalId": product.external_id,
        "isTop": marketing.is_top if marketing else False,
        "topOrder": marketing.top_order if marketing else None,
    }


def find_products_by_name(query: str, limit: int = DEFAULT_LIMIT) -> List[Dict[str, Any]]:
    """
    Find products by name.

    Args:
        query: Search text
        limit: Maximum number of products returned

    Returns:
        List of {id, name, externalId, isTop, topOrder}; empty for a blank query
    """
    query = (query or "").strip()
    if not query or limit <= 0:
        return []

    matches = list(
        CatalogProduct.objects.filter(name__icontains=query)
        .select_related("marketing")
        .order_by("name")[:limit]
    )

    if len(matches) < limit:
        seen = {product.id for product in matches}
        query_lower = query.lower()
        scored = []

        candidates = CatalogProduct.objects.exclude(id__in=seen).only("id", "name")
        for candidate in candidates.iterator():
            score = fuzz.token_set_ratio(query_lower, candidate.name.lower())
            if score >= FUZZY_SCORE_CUTOFF:
                scored.append((score, candidate.name, candidate.id))

        scored.sort(key=lambda entry: (-entry[0], entry[1]))
        fuzzy_ids = [product_id for _, _, product_id in scored[: limit - len(matches)]]

        if fuzzy_ids:
            by_id = CatalogProduct.objects.select_related("marketing").in_bulk(fuzzy_ids)
            matches.extend(by_id[product_id] for product_id in fuzzy_ids)

    logger.debug(f"Product search '{query}' returned {len(matches)} results")
    return [_serialize(product) for product in matches]
