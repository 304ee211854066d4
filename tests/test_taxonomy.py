"""
Tests for the feed taxonomy extractor and cache.
"""

import pytest

from catalog.feeds.parser import FeedItem
from catalog.models import FeedTaxonomy
from catalog.services.taxonomy import (
    Taxonomy,
    extract_taxonomy,
    get_feed_brands,
    get_feed_taxonomy,
    replace_taxonomy_cache,
)


def item(sku, category="", subcategory=""):
    return FeedItem(
        external_id=sku,
        name=sku,
        feed_category=category,
        feed_subcategory=subcategory,
    )


class TestExtractTaxonomy:
    """Tests for the pure taxonomy extraction."""

    def test_groups_and_sorts(self):
        taxonomy = extract_taxonomy([
            item("1", "Teas", "Herbal teas"),
            item("2", "Supplements", "Capsules"),
            item("3", "Teas", "Black teas"),
            item("4", "Teas", "Herbal teas"),
        ])

        assert taxonomy.categories == ["Supplements", "Teas"]
        assert taxonomy.subcategories == {
            "Supplements": ["Capsules"],
            "Teas": ["Black teas", "Herbal teas"],
        }

    def test_main_category_without_subcategory(self):
        taxonomy = extract_taxonomy([item("1", "Gifts")])

        assert taxonomy.categories == ["Gifts"]
        assert taxonomy.subcategories == {"Gifts": []}

    def test_items_without_category_ignored(self):
        taxonomy = extract_taxonomy([item("1"), item("2", "", "Orphan sub")])

        assert taxonomy.categories == []
        assert taxonomy.subcategories == {}


@pytest.mark.django_db
class TestTaxonomyCache:
    """Tests for replacing and reading the taxonomy cache."""

    def test_replace_writes_rows(self):
        replace_taxonomy_cache(Taxonomy(
            categories=["Teas"],
            subcategories={"Teas": ["Herbal teas"]},
        ))

        row = FeedTaxonomy.objects.get(category="Teas")
        assert row.subcategories == ["Herbal teas"]

    def test_replace_sets_exact_subcategories_and_removes_absent(self):
        FeedTaxonomy.objects.create(category="Teas", subcategories=["Green teas"])
        FeedTaxonomy.objects.create(category="Discontinued", subcategories=["Old"])

        replace_taxonomy_cache(Taxonomy(
            categories=["Teas"],
            subcategories={"Teas": ["Herbal teas"]},
        ))

        assert list(FeedTaxonomy.objects.values_list("category", flat=True)) == ["Teas"]
        assert FeedTaxonomy.objects.get(category="Teas").subcategories == ["Herbal teas"]

    def test_get_feed_taxonomy(self):
        FeedTaxonomy.objects.create(category="Teas", subcategories=["Herbal teas", "Black teas"])
        FeedTaxonomy.objects.create(category="Gifts", subcategories=[])

        data = get_feed_taxonomy()

        assert data["categories"] == ["Gifts", "Teas"]
        assert data["subcategoryData"] == [
            {"category": "Gifts", "subcategories": []},
            {"category": "Teas", "subcategories": ["Black teas", "Herbal teas"]},
        ]

    def test_get_feed_brands(self, make_product):
        make_product("SKU-1", brand="Vitalis")
        make_product("SKU-2", brand="Herbalia")
        make_product("SKU-3", brand="Herbalia")
        make_product("SKU-4")

        assert get_feed_brands() == ["Herbalia", "Vitalis"]
