"""
Tests for Sentry monitoring of sync operations.
"""

from unittest.mock import MagicMock, patch

from catalog.exceptions import FeedFetchError
from catalog.monitoring import add_sync_breadcrumb, capture_sync_error
from catalog.monitoring.sentry_integration import _filter_sensitive_data, _redact_url


class TestSensitiveDataFiltering:
    """Tests for _filter_sensitive_data() and _redact_url()."""

    def test_filters_nested_keys(self):
        data = {
            "feed": "luigisbox",
            "Authorization": "Bearer abc",
            "request": {"api_key": "k", "limit": 10},
        }

        assert _filter_sensitive_data(data) == {
            "feed": "luigisbox",
            "Authorization": "[Filtered]",
            "request": {"api_key": "[Filtered]", "limit": 10},
        }

    def test_non_dict_passthrough(self):
        assert _filter_sensitive_data("plain") == "plain"

    def test_redact_url_drops_query(self):
        url = "https://feeds.example.com/export.xml?key=s3cret#top"

        assert _redact_url(url) == "https://feeds.example.com/export.xml"

    def test_redact_empty(self):
        assert _redact_url(None) is None
        assert _redact_url("") == ""


class TestSentryCapture:
    """Tests for breadcrumbs and error capture."""

    @patch("catalog.monitoring.sentry_integration.sentry_sdk")
    def test_breadcrumb(self, mock_sentry):
        add_sync_breadcrumb(
            operation="sync",
            message="Fetched feed",
            feed_url="https://feeds.example.com/export.xml?key=s3cret",
            extra_data={"items": 3, "token": "t"},
        )

        kwargs = mock_sentry.add_breadcrumb.call_args.kwargs
        assert kwargs["category"] == "catalog.sync"
        assert kwargs["data"] == {
            "operation": "sync",
            "feed_url": "https://feeds.example.com/export.xml",
            "items": 3,
            "token": "[Filtered]",
        }

    @patch("catalog.monitoring.sentry_integration.sentry_sdk")
    def test_capture_tags_status_code(self, mock_sentry):
        scope = MagicMock()
        mock_sentry.new_scope.return_value.__enter__.return_value = scope
        error = FeedFetchError("HTTP 503", feed_url="https://feeds.example.com/x.xml", status_code=503)

        capture_sync_error(error, operation="sync", feed_url="https://feeds.example.com/x.xml")

        scope.set_tag.assert_any_call("catalog.operation", "sync")
        scope.set_tag.assert_any_call("catalog.feed_status", 503)
        mock_sentry.capture_exception.assert_called_once_with(error)

    @patch("catalog.monitoring.sentry_integration.sentry_sdk")
    def test_sentry_failure_does_not_propagate(self, mock_sentry):
        mock_sentry.new_scope.side_effect = RuntimeError("transport down")

        capture_sync_error(ValueError("boom"), operation="purge")

        mock_sentry.capture_exception.assert_not_called()
