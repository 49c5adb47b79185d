"""Error hierarchy shared by the feed download, parsing and caching layers."""

from __future__ import annotations


class FeedError(Exception):
    """Raised when the reference rates feed cannot be obtained or understood."""


class FetchError(FeedError):
    """Raised when the feed could not be downloaded (network error or timeout)."""


class ParseError(FeedError):
    """Raised when feed bytes do not match the expected XML structure."""
