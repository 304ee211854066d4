"""
Exceptions raised by the feed reconciliation services.

Fatal errors (feed unreachable, feed document unparseable, rejected operator
input) are raised to the caller. Recoverable errors (a malformed feed item, a
single failed record write) are absorbed by the services and reported through
counters in their result objects.
"""

from typing import Optional


class FeedSyncError(Exception):
    """Base class for all catalog sync errors."""

    pass


class FeedError(FeedSyncError):
    """The feed could not be turned into a list of items."""

    def __init__(self, message: str, feed_url: Optional[str] = None):
        super().__init__(message)
        self.feed_url = feed_url


class FeedFetchError(FeedError):
    """
    The feed endpoint was unreachable.

    Raised for non-2xx responses, timeouts and network failures. The sync
    that triggered the fetch is aborted before any catalog mutation.

    Attributes:
        status_code: HTTP status of the response, None when no response arrived
        cause: Underlying exception for network failures
    """

    def __init__(
        self,
        message: str,
        feed_url: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, feed_url=feed_url)
        self.status_code = status_code
        self.cause = cause


class FeedParseError(FeedError):
    """The feed body is not a parseable feed document."""

    pass


class InvalidConfirmationError(FeedSyncError):
    """An operator action was invoked without the required selection."""

    pass


class SyncInProgressError(FeedSyncError):
    """Another sync holds the single-writer lock for the same feed."""

    def __init__(self, feed_url: str):
        super().__init__(f"A sync is already running for {feed_url}")
        self.feed_url = feed_url
