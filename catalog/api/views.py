"""
Catalog Feed Sync API Views

REST API endpoints for the operator console:
- Feed sync (foreground or queued) and sync status
- Orphan check and confirmed deletion with backup
- Backup listing, stats and restore
- Product name search for restore targets
- Feed taxonomy for catalog filters
- Product gallery listing, attachment and deletion

All endpoints require authentication; feed-fetching and destructive
endpoints are rate limited.
"""

import logging
from urllib.parse import urlparse

from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from catalog.api.throttling import CatalogWriteThrottle, FeedSyncThrottle
from catalog.exceptions import FeedError, InvalidConfirmationError, SyncInProgressError
from catalog.models import FeedSyncJob
from catalog.services import (
    attach_image,
    delete_gallery_image,
    find_orphans,
    find_products_by_name,
    get_backup_stats,
    get_feed_brands,
    get_feed_taxonomy,
    get_sync_status,
    list_marketing_backups,
    list_product_images,
    purge,
    restore,
    restore_all_backups,
    sync_from_feed,
)

logger = logging.getLogger(__name__)


def _is_valid_url(url: str) -> bool:
    """Check if a string is an http(s) URL."""
    try:
        result = urlparse(url)
        return all([result.scheme in ('http', 'https'), result.netloc])
    except ValueError:
        return False


def _resolve_feed_url(request):
    """Feed URL from the request body, falling back to FEED_SYNC_FEED_URL."""
    return request.data.get('feedUrl') or getattr(settings, 'FEED_SYNC_FEED_URL', '')


def _parse_limit(value):
    """Return (limit, error) for an optional positive integer."""
    if value in (None, ''):
        return None, None
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return None, 'limit must be a positive integer'
    if limit < 1:
        return None, 'limit must be a positive integer'
    return limit, None


def _feed_error_response(error: FeedError) -> Response:
    """Map a fetch/parse failure to a 502 response."""
    return Response(
        {
            'error': 'Failed to fetch feed',
            'details': str(error),
            'statusCode': getattr(error, 'status_code', None),
        },
        status=status.HTTP_502_BAD_GATEWAY,
    )


# ============================================================
# Sync Endpoints
# ============================================================

@extend_schema(
    tags=['Sync'],
    summary='Sync catalog from feed',
    description='''
    Fetch the product feed and upsert its items into the catalog.

    Only feed-owned fields are written; marketing content is never touched.
    With background=true the sync is queued and a job id is returned.
    ''',
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'feedUrl': {'type': 'string', 'format': 'uri', 'description': 'Defaults to the configured feed'},
                'limit': {'type': 'integer', 'minimum': 1},
                'background': {'type': 'boolean', 'default': False},
            },
        }
    },
    responses={
        200: {
            'description': 'Sync completed',
            'content': {
                'application/json': {
                    'example': {
                        'success': True,
                        'created': 12,
                        'updated': 480,
                        'totalProducts': 492,
                        'failed': 0,
                        'restored': 1,
                        'skipped': 2,
                        'jobId': '5d0c7f5e-2c1e-4b8b-9d55-7c1d1f0b6a11',
                    }
                }
            }
        },
        202: {'description': 'Sync queued'},
        400: {'description': 'Missing or invalid feed URL or limit'},
        409: {'description': 'A sync is already running for this feed'},
        502: {'description': 'Feed unreachable or unparseable'},
    },
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([FeedSyncThrottle])
def sync_feed(request):
    """
    Run a feed sync.

    Request body:
    {
        "feedUrl": "https://example.com/feed.xml",
        "limit": 100,
        "background": false
    }
    """
    feed_url = _resolve_feed_url(request)
    if not feed_url:
        return Response(
            {'error': 'feedUrl is required (no FEED_SYNC_FEED_URL configured)'},
            status=status.HTTP_400_BAD_REQUEST
        )
    if not _is_valid_url(feed_url):
        return Response(
            {'error': 'Invalid feed URL format'},
            status=status.HTTP_400_BAD_REQUEST
        )

    limit, limit_error = _parse_limit(request.data.get('limit'))
    if limit_error:
        return Response({'error': limit_error}, status=status.HTTP_400_BAD_REQUEST)

    if request.data.get('background', False):
        from catalog.tasks import sync_feed as sync_feed_task

        job = FeedSyncJob.objects.create(feed_url=feed_url, item_limit=limit)
        sync_feed_task.delay(feed_url, limit, str(job.id))
        logger.info(f"Queued feed sync job {job.id} for {feed_url}")

        return Response(
            {'jobId': str(job.id), 'status': job.status},
            status=status.HTTP_202_ACCEPTED
        )

    try:
        result = sync_from_feed(feed_url, limit=limit)
    except FeedError as e:
        return _feed_error_response(e)
    except SyncInProgressError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    return Response(result.to_dict())


@extend_schema(
    tags=['Sync'],
    summary='Get catalog sync status',
    description='Product totals, products carrying marketing content, and the last sync time.',
    responses={
        200: {
            'description': 'Sync status',
            'content': {
                'application/json': {
                    'example': {
                        'totalProducts': 492,
                        'withMarketingData': 37,
                        'lastSync': '2026-10-18T06:00:04+00:00',
                    }
                }
            }
        },
    },
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sync_status(request):
    """Return catalog-wide sync status."""
    return Response(get_sync_status())


@extend_schema(
    tags=['Sync'],
    summary='Get sync job status',
    responses={
        200: {'description': 'Job status'},
        404: {'description': 'Job not found'},
    },
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sync_job_status(request, job_id):
    """
    Get status of a sync job.

    Returns the status, counters and timing of the specified job.
    """
    try:
        job = FeedSyncJob.objects.get(id=job_id)
    except FeedSyncJob.DoesNotExist:
        return Response(
            {'error': 'Job not found'},
            status=status.HTTP_404_NOT_FOUND
        )

    return Response({
        'jobId': str(job.id),
        'feedUrl': job.feed_url,
        'status': job.status,
        'limit': job.item_limit,
        'itemsParsed': job.items_parsed,
        'itemsSkipped': job.items_skipped,
        'created': job.created_count,
        'updated': job.updated_count,
        'failed': job.failed_count,
        'restored': job.restored_count,
        'startedAt': job.started_at.isoformat() if job.started_at else None,
        'completedAt': job.completed_at.isoformat() if job.completed_at else None,
        'durationSeconds': job.duration_seconds,
        'error': job.error_message or None,
    })


# ============================================================
# Orphan Endpoints
# ============================================================

@extend_schema(
    tags=['Orphans'],
    summary='Check for orphaned products',
    description='Re-fetch the feed and list catalog products whose SKU is no longer in it.',
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'feedUrl': {'type': 'string', 'format': 'uri'},
            },
        }
    },
    responses={
        200: {
            'description': 'Orphan report',
            'content': {
                'application/json': {
                    'example': {
                        'feedSkusCount': 490,
                        'orphanedProducts': [
                            {'id': '...', 'sku': 'A-1001', 'name': 'Chamomile tea', 'hasMarketingData': True},
                        ],
                    }
                }
            }
        },
        400: {'description': 'Missing feed URL'},
        502: {'description': 'Feed unreachable or unparseable'},
    },
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([FeedSyncThrottle])
def check_orphans(request):
    """List products missing from the feed. Read-only."""
    feed_url = _resolve_feed_url(request)
    if not feed_url or not _is_valid_url(feed_url):
        return Response(
            {'error': 'A valid feedUrl is required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        report = find_orphans(feed_url)
    except FeedError as e:
        return _feed_error_response(e)

    return Response({
        'feedSkusCount': report.feed_skus_count,
        'orphanedProducts': [
            {
                'id': orphan.id,
                'sku': orphan.identity_key,
                'name': orphan.name,
                'hasMarketingData': orphan.has_marketing_data,
            }
            for orphan in report.orphans
        ],
    })


@extend_schema(
    tags=['Orphans'],
    summary='Delete orphaned products',
    description='''
    Delete the confirmed products. Marketing content and gallery references
    are backed up by SKU before each delete.
    ''',
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'productIds': {'type': 'array', 'items': {'type': 'string', 'format': 'uuid'}},
            },
            'required': ['productIds'],
        }
    },
    responses={
        200: {
            'description': 'Deletion result',
            'content': {
                'application/json': {
                    'example': {'deleted': 3, 'backedUp': 1, 'galleryBackedUp': 4, 'failed': 0}
                }
            }
        },
        400: {'description': 'No products selected'},
    },
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([CatalogWriteThrottle])
def delete_orphans(request):
    """Back up and delete the confirmed products."""
    product_ids = request.data.get('productIds') or []
    if not isinstance(product_ids, list):
        return Response(
            {'error': 'productIds must be a list'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        result = purge(product_ids)
    except InvalidConfirmationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'deleted': result.deleted,
        'backedUp': result.backed_up,
        'galleryBackedUp': result.gallery_backed_up,
        'failed': result.failed,
    })


# ============================================================
# Backup Endpoints
# ============================================================

@extend_schema(
    tags=['Backups'],
    summary='List marketing backups',
    description='Marketing backups, newest first.',
    responses={200: {'description': 'List of backups'}},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_backups(request):
    """List marketing backups."""
    return Response(list_marketing_backups())


@extend_schema(
    tags=['Backups'],
    summary='Get backup stats',
    responses={
        200: {
            'description': 'Backup counts',
            'content': {
                'application/json': {
                    'example': {'skusWithBackup': 5, 'marketingBackups': 6, 'galleryBackups': 11}
                }
            }
        },
    },
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def backup_stats(request):
    """Return backup counters."""
    return Response(get_backup_stats())


@extend_schema(
    tags=['Backups'],
    summary='Restore a backup onto a product',
    description='''
    Apply the newest marketing backup for a SKU onto a live product and
    re-attach its backed-up gallery images.
    ''',
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'productId': {'type': 'string', 'format': 'uuid'},
                'sku': {'type': 'string'},
            },
            'required': ['productId', 'sku'],
        }
    },
    responses={
        200: {
            'description': 'Restore result',
            'content': {
                'application/json': {
                    'example': {'restored': True, 'galleryImages': 2}
                }
            }
        },
        400: {'description': 'Missing product or SKU'},
    },
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([CatalogWriteThrottle])
def restore_backup(request):
    """Restore a backup onto the chosen product."""
    try:
        result = restore(request.data.get('productId'), request.data.get('sku'))
    except InvalidConfirmationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    if not result.restored:
        return Response({'restored': False, 'reason': result.reason})

    return Response({'restored': True, 'galleryImages': result.media_count})


@extend_schema(
    tags=['Backups'],
    summary='Restore all backups',
    description='Restore every backed-up SKU that has a live product with the same SKU.',
    request=None,
    responses={
        200: {
            'description': 'SKUs restored and SKUs without a live product',
            'content': {
                'application/json': {
                    'example': {'restored': ['A-1001'], 'notFound': ['A-0999']}
                }
            }
        },
    },
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([CatalogWriteThrottle])
def restore_all(request):
    """Restore all backups with a matching live product."""
    result = restore_all_backups()
    return Response({'restored': result['restored'], 'notFound': result['not_found']})


# ============================================================
# Catalog Lookup Endpoints
# ============================================================

@extend_schema(
    tags=['Catalog'],
    summary='Search products by name',
    parameters=[
        OpenApiParameter(name='q', type=OpenApiTypes.STR, description='Search text'),
        OpenApiParameter(name='limit', type=OpenApiTypes.INT, description='Maximum results (default 10)'),
    ],
    responses={200: {'description': 'Matching products'}},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def search_products(request):
    """Find products by name for restore target selection."""
    limit, limit_error = _parse_limit(request.query_params.get('limit'))
    if limit_error:
        return Response({'error': limit_error}, status=status.HTTP_400_BAD_REQUEST)

    products = find_products_by_name(request.query_params.get('q', ''), limit=limit or 10)
    return Response({'products': products})


@extend_schema(
    tags=['Catalog'],
    summary='Get feed taxonomy',
    description='Main categories from the latest feed pull with their subcategories.',
    responses={
        200: {
            'description': 'Feed taxonomy',
            'content': {
                'application/json': {
                    'example': {
                        'categories': ['Teas'],
                        'subcategoryData': [{'category': 'Teas', 'subcategories': ['Herbal teas']}],
                    }
                }
            }
        },
    },
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def feed_taxonomy(request):
    """Return the cached feed taxonomy."""
    return Response(get_feed_taxonomy())


@extend_schema(
    tags=['Catalog'],
    summary='List feed brands',
    responses={200: {'description': 'Distinct brands of catalog products'}},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def feed_brands(request):
    """Return distinct brands of catalog products."""
    return Response({'brands': get_feed_brands()})


# ============================================================
# Gallery Endpoints
# ============================================================

@extend_schema(
    tags=['Gallery'],
    summary='List product gallery images',
    parameters=[
        OpenApiParameter(name='tag', type=OpenApiTypes.STR, description='Only images with this tag'),
    ],
    responses={200: {'description': 'Gallery images with URLs'}},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_images(request, product_id):
    """List the gallery of a product."""
    images = list_product_images(product_id, tag=request.query_params.get('tag') or None)
    return Response({'images': images})


@extend_schema(
    tags=['Gallery'],
    summary='Attach an uploaded file to a product gallery',
    description='''
    Register a file already stored under storageKey as a gallery image of
    the product.
    ''',
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'storageKey': {'type': 'string'},
                'filename': {'type': 'string'},
                'contentType': {'type': 'string'},
                'size': {'type': 'integer', 'minimum': 0},
                'tags': {'type': 'array', 'items': {'type': 'string'}},
            },
            'required': ['storageKey', 'filename', 'contentType'],
        }
    },
    responses={
        201: {'description': 'Gallery image created'},
        400: {'description': 'Unknown product or missing storage key'},
    },
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([CatalogWriteThrottle])
def attach_product_image(request, product_id):
    """Attach a stored file to the gallery of a product."""
    tags = request.data.get('tags') or []
    if not isinstance(tags, list):
        return Response({'error': 'tags must be a list'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        size = int(request.data.get('size') or 0)
    except (TypeError, ValueError):
        return Response({'error': 'size must be an integer'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        image = attach_image(
            product_id,
            request.data.get('storageKey', ''),
            request.data.get('filename', ''),
            request.data.get('contentType', ''),
            size=size,
            tags=tags,
        )
    except InvalidConfirmationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(
        {
            'id': str(image.id),
            'storageKey': image.storage_key,
            'filename': image.filename,
            'contentType': image.content_type,
            'size': image.size,
            'tags': image.tags,
        },
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    tags=['Gallery'],
    summary='Delete a gallery image',
    description='Deletes the gallery row; the stored file is removed only when nothing else references it.',
    responses={
        200: {'description': 'Image deleted'},
        404: {'description': 'Image not found'},
    },
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
@throttle_classes([CatalogWriteThrottle])
def delete_image(request, image_id):
    """Delete a gallery image."""
    try:
        blob_deleted = delete_gallery_image(image_id)
    except InvalidConfirmationError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response({'deleted': True, 'blobDeleted': blob_deleted})
