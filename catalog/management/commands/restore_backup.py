"""
Management command to restore backed-up marketing content.

Usage:
    python manage.py restore_backup <product_id> <sku>
    python manage.py restore_backup --all
"""

import logging

from django.core.management.base import BaseCommand, CommandError

from catalog.exceptions import InvalidConfirmationError
from catalog.services import restore, restore_all_backups

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Restore a marketing backup onto a product."""

    help = 'Restore backed-up marketing content and gallery images onto a product'

    def add_arguments(self, parser):
        parser.add_argument('product_id', nargs='?', help='Target product id')
        parser.add_argument('sku', nargs='?', help='SKU of the backup to restore')
        parser.add_argument(
            '--all',
            action='store_true',
            help='Restore every backup that has a live product with the same SKU',
        )

    def handle(self, *args, **options):
        if options['all']:
            result = restore_all_backups()
            self.stdout.write(
                self.style.SUCCESS(f"Restored {len(result['restored'])} products")
            )
            if result['not_found']:
                self.stdout.write(
                    self.style.WARNING(
                        f"No live product for {len(result['not_found'])} SKUs: "
                        f"{', '.join(result['not_found'])}"
                    )
                )
            return

        product_id = options['product_id']
        sku = options['sku']
        if not product_id or not sku:
            raise CommandError('Provide <product_id> <sku>, or use --all')

        try:
            result = restore(product_id, sku)
        except InvalidConfirmationError as e:
            raise CommandError(str(e))

        if not result.restored:
            self.stdout.write(self.style.WARNING(result.reason))
            return

        self.stdout.write(
            self.style.SUCCESS(
                f'Restored {sku} onto {product_id} ({result.media_count} gallery images)'
            )
        )
