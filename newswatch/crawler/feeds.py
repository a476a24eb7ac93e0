"""
Syndication feed ingestion (RSS/Atom).

Feeds are the fast path: their entries become records directly, and
newly saved entry URLs are queued for full-body extraction.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import feedparser
import httpx
from bs4 import BeautifulSoup

from newswatch.core.config import Settings, get_settings
from newswatch.crawler.errors import FeedError
from newswatch.crawler.frontier import Frontier
from newswatch.crawler.keywords import KeywordMatcher
from newswatch.crawler.parser import collapse_whitespace
from newswatch.crawler.pipeline import RecordPipeline, SaveOutcome
from newswatch.crawler.records import (
    SUMMARY_MAX_LENGTH,
    CrawlStats,
    FrontierEntry,
    Record,
    UserData,
    utc_now_iso,
)
from newswatch.crawler.urls import is_absolute_http_url, url_hostname

logger = logging.getLogger(__name__)

URL_FIELDS = ("link", "guid", "id")


class FeedReader:
    """Downloads a feed with httpx and parses it with feedparser."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                self.settings.STATIC_FETCH_TIMEOUT_SECONDS,
                connect=self.settings.CONNECT_TIMEOUT_SECONDS,
            ),
            follow_redirects=True,
            headers={"User-Agent": self.settings.USER_AGENTS[0] if self.settings.USER_AGENTS else "newswatch/0.1"},
        )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def read(self, feed_url: str) -> feedparser.FeedParserDict:
        """
        Fetch and parse a feed.

        Raises:
            FeedError: If the feed cannot be downloaded or parsed
        """
        if not self._client:
            raise RuntimeError("FeedReader not started. Use 'async with' or call start()")
        try:
            response = await self._client.get(feed_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FeedError(feed_url, f"download failed: {e}") from e
        return parse_feed(feed_url, response.content)


def parse_feed(feed_url: str, content: Any) -> feedparser.FeedParserDict:
    """
    Parse feed content, rejecting documents feedparser could not read.

    Raises:
        FeedError: If the document is not a usable feed
    """
    parsed = feedparser.parse(content)
    if parsed.get("bozo") and not parsed.get("entries"):
        raise FeedError(feed_url, f"parse failed: {parsed.get('bozo_exception')}")
    return parsed


def entry_url(entry: dict) -> Optional[str]:
    """First absolute http(s) URL among the entry's link, guid and id."""
    for key in URL_FIELDS:
        value = entry.get(key)
        if isinstance(value, str) and is_absolute_http_url(value):
            return value.strip()
    return None


def entry_published_at(entry: dict) -> str:
    for key in ("published", "updated"):
        parsed = entry.get(f"{key}_parsed")
        if parsed:
            return datetime(*parsed[:6], tzinfo=timezone.utc).isoformat()
        raw = entry.get(key)
        if raw:
            return str(raw).strip()
    return ""


def entry_summary(entry: dict) -> str:
    """Plain-text content snippet, else raw content, else summary."""
    content = ""
    if entry.get("content"):
        content = entry["content"][0].get("value", "") or ""
    summary = entry.get("summary", "") or ""
    raw = content or summary
    snippet = collapse_whitespace(BeautifulSoup(raw, "html.parser").get_text(" ")) if raw else ""
    return (snippet or content or summary)[:SUMMARY_MAX_LENGTH]


def entry_author(entry: dict) -> str:
    author = entry.get("author")
    if author:
        return str(author).strip()
    for detail in entry.get("authors") or []:
        name = detail.get("name") if isinstance(detail, dict) else None
        if name:
            return str(name).strip()
    return ""


def entry_tags(entry: dict) -> tuple:
    return tuple(
        tag["term"].strip()
        for tag in entry.get("tags") or []
        if isinstance(tag, dict) and tag.get("term")
    )


class FeedIngestor:
    """Turns feed entries into records and seeds the frontier."""

    def __init__(
        self,
        reader: FeedReader,
        pipeline: RecordPipeline,
        frontier: Frontier,
        keyword_matcher: Optional[KeywordMatcher] = None,
        extract_full_article: bool = True,
        stats: Optional[CrawlStats] = None,
    ):
        self.reader = reader
        self.pipeline = pipeline
        self.frontier = frontier
        self.keyword_matcher = keyword_matcher or KeywordMatcher()
        self.extract_full_article = extract_full_article
        self.stats = stats if stats is not None else pipeline.stats

    def build_record(self, entry: dict, source: str) -> Optional[Record]:
        """Map one feed entry to a record; None if it has no usable URL."""
        url = entry_url(entry)
        if url is None:
            return None
        title = (entry.get("title") or "").strip()
        summary = entry_summary(entry)
        return Record(
            title=title,
            source=source,
            published_at=entry_published_at(entry),
            author=entry_author(entry),
            summary=summary,
            tags=entry_tags(entry),
            keywords_matched=tuple(self.keyword_matcher.match(f"{title}\n{summary}")),
            url=url,
            extracted_at=utc_now_iso(),
        )

    async def ingest(self, feed_url: str) -> bool:
        """
        Ingest every entry of one feed.

        Returns:
            True if the feed was processed, False if it failed
        """
        try:
            parsed = await self.reader.read(feed_url)
            source = (parsed.feed.get("title") or "").strip() or url_hostname(feed_url)
            saved = 0
            for entry in parsed.entries:
                record = self.build_record(entry, source)
                if record is None:
                    self.stats.feed_entries_skipped += 1
                    logger.debug(f"Skipping entry without URL in {feed_url}: {entry.get('title')!r}")
                    continue
                outcome = await self.pipeline.save(record)
                if outcome != SaveOutcome.SAVED:
                    continue
                saved += 1
                if self.extract_full_article and record.url:
                    await self.frontier.add(
                        FrontierEntry(url=record.url, user_data=UserData(from_feed=True))
                    )
        except Exception as e:
            self.stats.feeds_failed += 1
            logger.warning(f"Failed to ingest feed {feed_url}: {e}")
            return False

        self.stats.feeds_processed += 1
        logger.info(f"Feed {feed_url}: {len(parsed.entries)} entries, {saved} saved")
        return True

    async def ingest_all(self, feed_urls: Iterable[str]) -> None:
        """Ingest feeds one after another."""
        for feed_url in feed_urls:
            await self.ingest(feed_url)
