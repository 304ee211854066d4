"""
Catalog Feed Sync REST API Module

This module provides REST API endpoints for:
- Feed sync triggering and job status
- Orphan checks and confirmed deletion with backup
- Marketing backup listing and restore
- Product search, feed taxonomy and gallery management

All endpoints require authentication; feed-fetching and destructive
endpoints have rate limiting.
"""

from catalog.api.throttling import (
    CatalogWriteThrottle,
    FeedSyncThrottle,
)

__all__ = [
    'CatalogWriteThrottle',
    'FeedSyncThrottle',
]
