"""
Management command to list (and optionally delete) orphaned catalog products.

Orphans are products whose SKU no longer appears in the feed. Deleting them
backs up their marketing content and gallery references first.

Usage:
    python manage.py check_orphans
    python manage.py check_orphans --url=https://example.com/feed.xml
    python manage.py check_orphans --delete --yes
"""

import logging

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from catalog.exceptions import FeedError
from catalog.services import find_orphans, purge

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """List products missing from the feed."""

    help = 'List catalog products whose SKU is no longer in the feed'

    def add_arguments(self, parser):
        parser.add_argument(
            '--url',
            default=None,
            help='Feed URL (default: FEED_SYNC_FEED_URL)',
        )
        parser.add_argument(
            '--delete',
            action='store_true',
            help='Delete the orphans after backing them up',
        )
        parser.add_argument(
            '--yes',
            action='store_true',
            help='Confirm deletion (required with --delete)',
        )

    def handle(self, *args, **options):
        feed_url = options['url'] or getattr(settings, 'FEED_SYNC_FEED_URL', '')
        delete = options['delete']

        if not feed_url:
            raise CommandError('No feed URL given and FEED_SYNC_FEED_URL is not set')
        if delete and not options['yes']:
            raise CommandError('Refusing to delete without --yes')

        try:
            report = find_orphans(feed_url)
        except FeedError as e:
            raise CommandError(f'Orphan check failed: {e}')

        self.stdout.write(f'Feed contains {report.feed_skus_count} SKUs')

        if not report.orphans:
            self.stdout.write(self.style.SUCCESS('No orphaned products'))
            return

        self.stdout.write(f'Found {len(report.orphans)} orphaned products:')
        for orphan in report.orphans:
            marker = ' [marketing]' if orphan.has_marketing_data else ''
            self.stdout.write(f'  {orphan.identity_key}  {orphan.name}{marker}')

        if not delete:
            return

        result = purge([orphan.id for orphan in report.orphans])

        message = (
            f'Deleted {result.deleted} products, backed up {result.backed_up} '
            f'marketing records and {result.gallery_backed_up} gallery images'
        )
        if result.failed:
            self.stdout.write(self.style.WARNING(f'{message}; {result.failed} failed'))
        else:
            self.stdout.write(self.style.SUCCESS(message))
