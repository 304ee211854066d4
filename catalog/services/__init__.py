"""
Feed reconciliation services for the product catalog.
"""

from .backups import get_backup_stats, list_marketing_backups
from .feed_sync import FeedSyncResult, get_sync_status, sync_from_feed
from .media import (
    BlobStorage,
    attach_image,
    delete_gallery_image,
    list_product_images,
)
from .orphans import OrphanCandidate, OrphanReport, find_orphans
from .purge import PurgeResult, purge
from .reconciler import ReconcileResult, reconcile
from .restore import RestoreResult, restore, restore_all_backups
from .search import find_products_by_name
from .taxonomy import (
    Taxonomy,
    extract_taxonomy,
    get_feed_brands,
    get_feed_taxonomy,
    replace_taxonomy_cache,
)

__all__ = [
    "BlobStorage",
    "FeedSyncResult",
    "OrphanCandidate",
    "OrphanReport",
    "PurgeResult",
    "ReconcileResult",
    "RestoreResult",
    "Taxonomy",
    "attach_image",
    "delete_gallery_image",
    "extract_taxonomy",
    "find_orphans",
    "find_products_by_name",
    "get_backup_stats",
    "get_feed_brands",
    "get_feed_taxonomy",
    "get_sync_status",
    "list_marketing_backups",
    "list_product_images",
    "purge",
    "reconcile",
    "replace_taxonomy_cache",
    "restore",
    "restore_all_backups",
    "sync_from_feed",
]
