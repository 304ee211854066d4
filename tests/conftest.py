"""
Pytest configuration and fixtures for the Catalog Feed Sync test suite.
"""

import pytest

from tests.factories import FEED_URL, feed_transport, luigisbox_feed, luigisbox_item


@pytest.fixture(scope="session")
def django_db_setup(django_db_blocker):
    """Configure the test database and run migrations."""
    from django.core.management import call_command

    with django_db_blocker.unblock():
        call_command("migrate", "--run-syncdb", verbosity=0)


@pytest.fixture(autouse=True)
def clear_cache():
    """Reset the locmem cache (sync locks, throttle history) between tests."""
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Create a test API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def operator(db):
    """Create an operator user."""
    from django.contrib.auth import get_user_model

    return get_user_model().objects.create_user(username="operator", password="secret")


@pytest.fixture
def auth_client(api_client, operator):
    """API client authenticated as the operator."""
    api_client.force_authenticate(user=operator)
    return api_client


# ============================================================
# Feed documents
# ============================================================


@pytest.fixture
def sample_feed():
    """Three products in two categories."""
    return luigisbox_feed(
        luigisbox_item(
            "SKU-1",
            "Chamomile Tea",
            category="Teas | Herbal teas",
            price="89,00 Kč",
            brand="Herbalia",
            ean="8590000000011",
            url="https://shop.example.com/chamomile-tea",
            image_link_l="https://cdn.example.com/chamomile.jpg",
            availability_rank_text="In stock",
            description="Loose chamomile flowers",
        ),
        luigisbox_item(
            "SKU-2",
            "Peppermint Tea",
            category="Teas | Herbal teas",
            price="79,00 Kč",
            brand="Herbalia",
        ),
        luigisbox_item(
            "SKU-3",
            "Ginseng Capsules",
            category="Supplements | Capsules",
            price="249,00 Kč",
            brand="Vitalis",
        ),
    )


@pytest.fixture
def make_fetcher():
    """Build a FeedFetcher backed by a mock transport."""
    from catalog.feeds.fetcher import FeedFetcher

    def _make(content=b"", status_code=200):
        return FeedFetcher(
            timeout=5,
            max_size_bytes=1024 * 1024,
            user_agent="CatalogFeedSync/test",
            transport=feed_transport(content, status_code),
        )

    return _make


@pytest.fixture
def parse_feed():
    """Parse a feed document with the default dialect."""
    from catalog.feeds.parser import FeedParser

    def _parse(content):
        return FeedParser().parse(content, source_url=FEED_URL)

    return _parse


# ============================================================
# Catalog fixtures
# ============================================================


@pytest.fixture
def make_product(db):
    """Create a catalog product, optionally with marketing content."""
    from catalog.models import CatalogProduct, ProductMarketing

    def _make(external_id, name=None, marketing=None, **fields):
        product = CatalogProduct.objects.create(
            external_id=external_id,
            name=name or f"Product {external_id}",
            **fields,
        )
        if marketing is not None:
            ProductMarketing.objects.create(product=product, **marketing)
        return product

    return _make


@pytest.fixture
def make_image(db):
    """Attach a gallery row to a product."""
    from catalog.models import GalleryImage

    def _make(product, storage_key, filename=None, tags=None):
        return GalleryImage.objects.create(
            product=product,
            storage_key=storage_key,
            filename=filename or f"{storage_key}.jpg",
            content_type="image/jpeg",
            size=1024,
            tags=tags or [],
        )

    return _make
