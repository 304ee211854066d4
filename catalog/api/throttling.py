"""
API throttle classes for the catalog sync endpoints.
"""

from rest_framework.throttling import UserRateThrottle


class FeedSyncThrottle(UserRateThrottle):
    """
    Throttle for endpoints that fetch the feed.

    Rate: 30 requests per hour per user.
    Applied to: /api/v1/catalog/sync/, /api/v1/catalog/orphans/check/
    """

    rate = '30/hour'
    scope = 'feed_sync'


class CatalogWriteThrottle(UserRateThrottle):
    """
    Throttle for destructive catalog operations.

    Rate: 60 requests per hour per user.
    Applied to: /api/v1/catalog/orphans/delete/, /api/v1/catalog/backups/restore/,
    /api/v1/catalog/backups/restore-all/
    """

    rate = '60/hour'
    scope = 'catalog_write'
