"""
Management command to sync the catalog from the product feed.

Usage:
    python manage.py sync_feed
    python manage.py sync_feed --url=https://example.com/feed.xml
    python manage.py sync_feed --limit=50
"""

import logging

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from catalog.exceptions import FeedError, SyncInProgressError
from catalog.services import sync_from_feed

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Sync the catalog from the product feed."""

    help = 'Fetch the product feed and upsert its items into the catalog'

    def add_arguments(self, parser):
        parser.add_argument(
            '--url',
            default=None,
            help='Feed URL (default: FEED_SYNC_FEED_URL)',
        )
        parser.add_argument(
            '--limit',
            type=int,
            default=None,
            help='Process at most this many feed items',
        )

    def handle(self, *args, **options):
        feed_url = options['url'] or getattr(settings, 'FEED_SYNC_FEED_URL', '')
        limit = options['limit']

        if not feed_url:
            raise CommandError('No feed URL given and FEED_SYNC_FEED_URL is not set')
        if limit is not None and limit < 1:
            raise CommandError('--limit must be a positive integer')

        self.stdout.write(f'Syncing catalog from {feed_url}')

        try:
            result = sync_from_feed(feed_url, limit=limit)
        except (FeedError, SyncInProgressError) as e:
            raise CommandError(f'Sync failed: {e}')

        self.stdout.write(
            f'  {result.total_products} items processed, {result.skipped} skipped by parser'
        )
        if result.restored:
            self.stdout.write(f'  {result.restored} reappeared products restored from backup')

        message = (
            f'Sync complete: {result.created} created, {result.updated} updated, '
            f'{result.failed} failed'
        )
        if result.failed:
            self.stdout.write(self.style.WARNING(message))
        else:
            self.stdout.write(self.style.SUCCESS(message))
