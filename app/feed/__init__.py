"""Feed download, parsing, and local caching for the ECB reference rates."""

from .base import FeedError, FetchError, ParseError
from .cache import CacheStore
from .ecb_client import EcbFeedClient, EcbFeedClientConfig
from .parser import parse_feed

__all__ = [
    "CacheStore",
    "EcbFeedClient",
    "EcbFeedClientConfig",
    "FeedError",
    "FetchError",
    "ParseError",
    "parse_feed",
]
