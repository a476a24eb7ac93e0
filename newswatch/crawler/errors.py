"""
Exception types raised inside the crawler package.

Fetch failures are reported through ``CrawlResult`` values instead of
exceptions; these cover feed reading and persistence.
"""


class CrawlerError(Exception):
    """Base class for crawler errors."""


class FeedError(CrawlerError):
    """A syndication feed could not be fetched or parsed."""

    def __init__(self, feed_url: str, message: str):
        self.feed_url = feed_url
        super().__init__(f"{feed_url}: {message}")


class StorageError(CrawlerError):
    """A record sink or object store write failed."""
