"""
Catalog Feed Sync API URL Configuration

Endpoints (mounted at /api/v1/catalog/):
- POST   sync/                        - Run (or queue) a feed sync
- GET    sync/status/                 - Catalog sync status
- GET    sync/jobs/<job_id>/          - Sync job status
- POST   orphans/check/               - List products missing from the feed
- POST   orphans/delete/              - Back up and delete confirmed products
- GET    backups/                     - List marketing backups
- GET    backups/stats/               - Backup counters
- POST   backups/restore/             - Restore a backup onto a product
- POST   backups/restore-all/         - Restore every matching backup
- GET    products/search/?q=          - Search products by name
- GET    products/<product_id>/images/ - Product gallery
- POST   products/<product_id>/images/attach/ - Attach a stored file to the gallery
- DELETE images/<image_id>/           - Delete a gallery image
- GET    taxonomy/                    - Feed categories
- GET    taxonomy/brands/             - Feed brands
"""

from django.urls import path

from catalog.api.views import (
    backup_stats,
    attach_product_image,
    check_orphans,
    delete_image,
    delete_orphans,
    feed_brands,
    feed_taxonomy,
    list_backups,
    product_images,
    restore_all,
    restore_backup,
    search_products,
    sync_feed,
    sync_job_status,
    sync_status,
)

app_name = 'catalog_api'

urlpatterns = [
    # Sync endpoints
    path('sync/', sync_feed, name='sync_feed'),
    path('sync/status/', sync_status, name='sync_status'),
    path('sync/jobs/<uuid:job_id>/', sync_job_status, name='sync_job_status'),

    # Orphan endpoints
    path('orphans/check/', check_orphans, name='check_orphans'),
    path('orphans/delete/', delete_orphans, name='delete_orphans'),

    # Backup endpoints
    path('backups/', list_backups, name='list_backups'),
    path('backups/stats/', backup_stats, name='backup_stats'),
    path('backups/restore/', restore_backup, name='restore_backup'),
    path('backups/restore-all/', restore_all, name='restore_all'),

    # Catalog lookup endpoints
    path('products/search/', search_products, name='search_products'),
    path('products/<uuid:product_id>/images/', product_images, name='product_images'),
    path('products/<uuid:product_id>/images/attach/', attach_product_image, name='attach_product_image'),
    path('images/<uuid:image_id>/', delete_image, name='delete_image'),
    path('taxonomy/', feed_taxonomy, name='feed_taxonomy'),
    path('taxonomy/brands/', feed_brands, name='feed_brands'),
]
