"""
Monitoring for feed sync operations.

- Sentry error tracking with sync context
"""

from .sentry_integration import add_sync_breadcrumb, capture_sync_error

__all__ = [
    "add_sync_breadcrumb",
    "capture_sync_error",
]
