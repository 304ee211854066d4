"""
Product Feed Fetcher.

Retrieves a feed document with a single HTTP GET (async httpx). Any failure
(non-2xx status, timeout, network error, oversized body) is raised as
FeedFetchError so the calling sync aborts before touching the catalog.
"""

import logging
from typing import Optional

import httpx
from asgiref.sync import async_to_sync
from django.conf import settings

from catalog.exceptions import FeedFetchError
from catalog.feeds.parser import FeedParser, FeedParseResult

logger = logging.getLogger(__name__)


class FeedFetcher:
    """
    Fetcher for product feed documents.

    Features:
    - Identifying User-Agent header
    - Configurable timeout and maximum document size
    - Redirects followed; the final response must be 2xx
    """

    DEFAULT_USER_AGENT = "CatalogFeedSync/1.0"

    DEFAULT_HEADERS = {
        "Accept": "application/xml, text/xml, */*;q=0.8",
        "Accept-Encoding": "gzip, deflate",
    }

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_size_bytes: Optional[int] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the feed fetcher.

        Args:
            timeout: Request timeout in seconds (default from settings)
            max_size_bytes: Maximum feed size to accept (default from settings)
            user_agent: User-Agent header (default from settings)
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout or getattr(settings, "FEED_SYNC_REQUEST_TIMEOUT", 30)
        self.max_size_bytes = max_size_bytes or getattr(
            settings, "FEED_SYNC_MAX_FEED_BYTES", 100 * 1024 * 1024
        )
        self.user_agent = user_agent or getattr(
            settings, "FEED_SYNC_USER_AGENT", self.DEFAULT_USER_AGENT
        )
        self.transport = transport

    async def fetch(self, feed_url: str) -> bytes:
        """
        Fetch the raw feed document.

        Args:
            feed_url: URL of the feed export

        Returns:
            Response body as bytes

        Raises:
            FeedFetchError: On any non-2xx status or transport failure
        """
        logger.info(f"Fetching feed from: {feed_url}")

        headers = {
            **self.DEFAULT_HEADERS,
            "User-Agent": self.user_agent,
        }

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                async with client.stream("GET", feed_url) as response:
                    self._check_response(feed_url, response)
                    content = await self._read_capped(feed_url, response)
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout fetching feed {feed_url}: {e}")
            raise FeedFetchError(
                f"Timeout fetching feed: {e}", feed_url=feed_url, cause=e
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Error fetching feed {feed_url}: {e}")
            raise FeedFetchError(
                f"Failed to fetch feed: {e}", feed_url=feed_url, cause=e
            ) from e

        logger.info(f"Received {len(content)} bytes of feed XML")
        return content

    def _check_response(self, feed_url: str, response: httpx.Response) -> None:
        """Reject non-2xx responses and declared sizes over the cap."""
        if not response.is_success:
            logger.warning(f"Feed fetch returned HTTP {response.status_code} for {feed_url}")
            raise FeedFetchError(
                f"Failed to fetch feed: HTTP {response.status_code}",
                feed_url=feed_url,
                status_code=response.status_code,
            )

        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_size_bytes:
            raise FeedFetchError(
                f"Feed too large: {content_length} bytes exceeds {self.max_size_bytes}",
                feed_url=feed_url,
                status_code=response.status_code,
            )

    async def _read_capped(self, feed_url: str, response: httpx.Response) -> bytes:
        """Read the body chunk by chunk, stopping as soon as it exceeds the cap."""
        chunks = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > self.max_size_bytes:
                raise FeedFetchError(
                    f"Feed too large: more than {self.max_size_bytes} bytes",
                    feed_url=feed_url,
                    status_code=response.status_code,
                )
            chunks.append(chunk)
        return b"".join(chunks)


def fetch_and_parse(
    feed_url: str,
    dialect: Optional[str] = None,
    fetcher: Optional[FeedFetcher] = None,
) -> FeedParseResult:
    """
    Fetch a feed and decode it into items.

    Synchronous entry point used by the sync services.

    Args:
        feed_url: URL of the feed export
        dialect: Feed dialect name (default from FEED_SYNC_DIALECT)
        fetcher: Optional FeedFetcher instance

    Returns:
        FeedParseResult with items in feed order

    Raises:
        FeedFetchError: If the feed is unreachable
        FeedParseError: If the document cannot be parsed
    """
    fetcher = fetcher or FeedFetcher()
    content = async_to_sync(fetcher.fetch)(feed_url)

    parser = FeedParser(dialect or getattr(settings, "FEED_SYNC_DIALECT", None))
    return parser.parse(content, source_url=feed_url)
