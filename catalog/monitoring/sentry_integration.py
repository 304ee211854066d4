"""
Sentry error tracking for feed sync operations.

The SDK itself is initialised in config/settings/base.py; this module adds
sync context (feed URL, operation) as breadcrumbs and tags, and filters
sensitive values before they leave the process.

Usage:
    from catalog.monitoring import capture_sync_error, add_sync_breadcrumb

    try:
        parsed = fetch_and_parse(feed_url)
    except FeedError as e:
        capture_sync_error(e, operation="sync", feed_url=feed_url)
        raise
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

import sentry_sdk

logger = logging.getLogger(__name__)

# Sensitive fields to filter from Sentry events
SENSITIVE_FIELDS = {
    "cookie",
    "api_key",
    "apikey",
    "authorization",
    "password",
    "secret",
    "token",
}


def _filter_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace values of keys that look sensitive, recursing into dicts.
    """
    if not isinstance(data, dict):
        return data

    filtered = {}
    for key, value in data.items():
        key_lower = str(key).lower()
        if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
            filtered[key] = "[Filtered]"
        elif isinstance(value, dict):
            filtered[key] = _filter_sensitive_data(value)
        else:
            filtered[key] = value

    return filtered


def _redact_url(url: Optional[str]) -> Optional[str]:
    """Drop the query string, which for some feed exports carries an access key."""
    if not url:
        return url
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def add_sync_breadcrumb(
    operation: str,
    message: str,
    feed_url: Optional[str] = None,
    level: str = "info",
    extra_data: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Add a breadcrumb describing a step of a sync operation.

    Args:
        operation: Operation name (sync, check_orphans, purge, restore)
        message: Description of the step
        feed_url: Feed URL involved, if any
        level: Log level (info, warning, error)
        extra_data: Additional context data
    """
    data = {"operation": operation}
    if feed_url:
        data["feed_url"] = _redact_url(feed_url)
    if extra_data:
        data.update(_filter_sensitive_data(extra_data))

    try:
        sentry_sdk.add_breadcrumb(
            category="catalog.sync",
            message=message,
            level=level,
            data=data,
        )
    except Exception as e:
        logger.warning(f"Failed to add Sentry breadcrumb: {e}")


def capture_sync_error(
    error: Exception,
    operation: str,
    feed_url: Optional[str] = None,
    extra_context: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Capture a sync error to Sentry with operation context.

    Args:
        error: The exception that occurred
        operation: Operation name (sync, check_orphans, purge, restore)
        feed_url: Feed URL involved, if any
        extra_context: Additional context (filtered for sensitive data)
    """
    add_sync_breadcrumb(
        operation=operation,
        message=f"Error: {type(error).__name__}",
        feed_url=feed_url,
        level="error",
        extra_data=extra_context,
    )

    try:
        with sentry_sdk.new_scope() as scope:
            scope.set_tag("catalog.operation", operation)

            status_code = getattr(error, "status_code", None)
            if status_code is not None:
                scope.set_tag("catalog.feed_status", status_code)
            if feed_url:
                scope.set_extra("feed_url", _redact_url(feed_url))
            if extra_context:
                scope.set_extra("sync_context", _filter_sensitive_data(extra_context))

            sentry_sdk.capture_exception(error)

    except Exception as e:
        logger.warning(f"Failed to capture exception to Sentry: {e}")
