"""
Shared test doubles: in-memory fetch transport and feed reader.
"""
from typing import Dict, List, Optional
from xml.sax.saxutils import escape

import pytest

from newswatch.core.config import Settings
from newswatch.crawler.base import CrawlResult, FetchStrategy, PageFetcher
from newswatch.crawler.errors import FeedError
from newswatch.crawler.feeds import FeedReader, parse_feed


class FakeFetcher(PageFetcher):
    """Serves HTML from a dict; unknown URLs fail with HTTP 404."""

    def __init__(
        self,
        pages: Dict[str, str],
        redirects: Optional[Dict[str, str]] = None,
        strategy: FetchStrategy = FetchStrategy.STATIC,
    ):
        self.pages = pages
        self.redirects = redirects or {}
        self.strategy = strategy
        self.handler_timeout_seconds = 5.0
        self.fetched: List[str] = []
        self.started = False
        self.closed = False

    async def start(self) -> None:
        self.started = True

    async def close(self) -> None:
        self.closed = True

    async def fetch(self, url: str) -> CrawlResult:
        self.fetched.append(url)
        loaded_url = self.redirects.get(url, url)
        if loaded_url not in self.pages:
            return CrawlResult(url=url, success=False, status_code=404, error="HTTP 404")
        return CrawlResult(
            url=url,
            success=True,
            status_code=200,
            content=self.pages[loaded_url],
            loaded_url=loaded_url,
        )


class FakeFeedReader(FeedReader):
    """Parses feed XML held in memory; unknown feeds fail to download."""

    def __init__(self, feeds: Dict[str, str]):
        self.feeds = feeds
        self.read_order: List[str] = []

    async def start(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def read(self, feed_url: str):
        self.read_order.append(feed_url)
        if feed_url not in self.feeds:
            raise FeedError(feed_url, "download failed: HTTP 404")
        return parse_feed(feed_url, self.feeds[feed_url])


def rss_feed(title: str, items: List[Dict[str, str]]) -> str:
    """Build an RSS 2.0 document from item dicts (link, guid, title, description...)."""
    rendered = []
    for item in items:
        parts = []
        for key, value in item.items():
            if key == "categories":
                parts.extend(f"<category>{escape(c)}</category>" for c in value)
            elif key == "creator":
                parts.append(f"<dc:creator>{escape(value)}</dc:creator>")
            else:
                parts.append(f"<{key}>{escape(value)}</{key}>")
        rendered.append(f"<item>{''.join(parts)}</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">'
        f"<channel><title>{escape(title)}</title><link>https://feeds.example.com/</link>"
        "<description>Test feed</description>"
        f"{''.join(rendered)}</channel></rss>"
    )


def article_page(
    title: str,
    body: str = "",
    links: Optional[List[str]] = None,
    head: str = "",
) -> str:
    """Build a small article page with an <h1>, an <article> body and anchors."""
    anchors = "".join(f'<a href="{href}">link</a>' for href in links or [])
    return (
        f"<html><head><title>{title}</title>{head}</head><body>"
        f"<nav>{anchors}</nav><h1>{title}</h1>"
        f"<article><p>{body}</p></article></body></html>"
    )


@pytest.fixture
def settings():
    """Settings isolated from the environment."""
    return Settings(_env_file=None)
