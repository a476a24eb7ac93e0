"""
Data model shared by feed ingestion, extraction and persistence.
"""
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

SUMMARY_MAX_LENGTH = 800
TEXT_MAX_LENGTH = 20000
SENTIMENT_MAX_TOKENS = 20


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class SentimentInfo:
    """Polarity details attached to a record."""
    comparative: float
    tokens: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "comparative": self.comparative,
            "tokens": list(self.tokens),
        }


@dataclass(frozen=True)
class Record:
    """
    One discovered article.

    Records are never mutated after creation; the save path attaches
    sentiment with ``dataclasses.replace`` before the sink write.
    """
    title: str
    source: str
    published_at: str = ""
    author: str = ""
    summary: str = ""
    tags: Tuple[str, ...] = ()
    keywords_matched: Tuple[str, ...] = ()
    url: Optional[str] = None
    extracted_at: str = field(default_factory=utc_now_iso)
    sentiment_score: Optional[float] = None
    sentiment: Optional[SentimentInfo] = None

    def __post_init__(self):
        if len(self.summary) > SUMMARY_MAX_LENGTH:
            object.__setattr__(self, "summary", self.summary[:SUMMARY_MAX_LENGTH])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "title": self.title,
            "source": self.source,
            "published_at": self.published_at,
            "author": self.author,
            "summary": self.summary,
            "tags": list(self.tags),
            "keywords_matched": list(self.keywords_matched),
            "url": self.url,
            "extracted_at": self.extracted_at,
            "sentiment_score": self.sentiment_score,
            "sentiment": self.sentiment.to_dict() if self.sentiment else None,
        }


@dataclass(frozen=True)
class FullArticle:
    """Full article body persisted to the object store, keyed by URL."""
    title: str
    author: str
    published_at: str
    text: str

    def __post_init__(self):
        if len(self.text) > TEXT_MAX_LENGTH:
            object.__setattr__(self, "text", self.text[:TEXT_MAX_LENGTH])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "published_at": self.published_at,
            "text": self.text,
        }


@dataclass(frozen=True)
class UserData:
    """Routing metadata carried by a frontier entry."""
    start_host: Optional[str] = None
    from_feed: bool = False


@dataclass(frozen=True)
class FrontierEntry:
    """A URL waiting to be fetched."""
    url: str
    user_data: UserData = field(default_factory=UserData)


@dataclass
class CrawlStats:
    """Counters collected over one crawl run."""
    feeds_processed: int = 0
    feeds_failed: int = 0
    feed_entries_skipped: int = 0
    pages_crawled: int = 0
    pages_failed: int = 0
    records_saved: int = 0
    duplicates_skipped: int = 0
    links_enqueued: int = 0
    articles_stored: int = 0
    article_store_failures: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)
