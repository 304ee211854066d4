"""
Catalog service views.

Health check endpoint for monitoring and load balancer checks.
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse

from catalog.models import FeedSyncJob

logger = logging.getLogger(__name__)

HEALTH_CACHE_KEY = "catalog:health-check"


def health_check(request):
    """
    Health check endpoint for the catalog service.

    Endpoint: GET /api/health/
    No authentication required (for load balancer checks).

    Response fields:
        - status: "healthy" or "unhealthy"
        - database: "connected" or "error"
        - cache: "connected" or "error"
        - last_sync: latest sync job {status, completed_at}, or null

    Returns:
        HTTP 200 for healthy, HTTP 503 for unhealthy
    """
    status = "healthy"
    http_status = 200

    # Check database connection
    database_status = "connected"
    try:
        connection.ensure_connection()
    except DatabaseError as e:
        logger.warning(f"Health check: database unavailable: {e}")
        database_status = "error"
        status = "unhealthy"
        http_status = 503

    # Check cache round trip (holds the sync lock)
    cache_status = "connected"
    try:
        cache.set(HEALTH_CACHE_KEY, "ok", 10)
        if cache.get(HEALTH_CACHE_KEY) != "ok":
            cache_status = "error"
    except Exception as e:
        logger.warning(f"Health check: cache unavailable: {e}")
        cache_status = "error"

    last_sync = None
    if database_status == "connected":
        job = FeedSyncJob.objects.order_by("-created_at").first()
        if job is not None:
            last_sync = {
                "status": job.status,
                "completed_at": job.completed_at.isoformat() if job.completed_at else None,
            }

    response_data = {
        "status": status,
        "database": database_status,
        "cache": cache_status,
        "last_sync": last_sync,
    }

    return JsonResponse(response_data, status=http_status)
