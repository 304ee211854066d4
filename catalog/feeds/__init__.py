"""
Feed retrieval and decoding.
"""

from .fetcher import FeedFetcher, fetch_and_parse
from .parser import (
    DIALECTS,
    FeedItem,
    FeedParser,
    FeedParseResult,
    get_dialect,
    split_category,
)

__all__ = [
    "DIALECTS",
    "FeedFetcher",
    "FeedItem",
    "FeedParser",
    "FeedParseResult",
    "fetch_and_parse",
    "get_dialect",
    "split_category",
]
