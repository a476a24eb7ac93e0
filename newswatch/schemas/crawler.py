"""
Schemas for crawl input and the crawler API endpoints.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FeedDescriptor(BaseModel):
    """A feed given as an object rather than a bare URL."""
    url: Optional[str] = None
    name: Optional[str] = None


class CrawlInput(BaseModel):
    """
    Per-run crawl options.

    Accepts both the camelCase input names (``rssFeeds``, ``startUrls``...)
    and the snake_case field names.
    """
    model_config = ConfigDict(populate_by_name=True)

    rss_feeds: List[Union[str, FeedDescriptor]] = Field(default_factory=list, alias="rssFeeds")
    start_urls: List[str] = Field(default_factory=list, alias="startUrls")
    keywords: List[str] = Field(default_factory=list)
    max_requests_per_crawl: int = Field(default=500, ge=0, alias="maxRequestsPerCrawl")
    use_browser: bool = Field(default=False, alias="useBrowser")
    deduplicate_by: Literal["url", "title"] = Field(default="url", alias="deduplicateBy")
    extract_full_article: bool = Field(default=True, alias="extractFullArticle")
    compute_sentiment: bool = Field(default=True, alias="computeSentiment")
    follow_internal_only: bool = Field(default=True, alias="followInternalOnly")
    concurrency: int = Field(default=10, ge=1)

    def feed_urls(self) -> List[str]:
        """Feed addresses in configured order, blank descriptors dropped."""
        urls = []
        for feed in self.rss_feeds:
            if isinstance(feed, FeedDescriptor):
                if feed.url and feed.url.strip():
                    urls.append(feed.url.strip())
            elif feed.strip():
                urls.append(feed.strip())
        return urls

    @property
    def worker_count(self) -> int:
        """Parallel fetch workers; halved for the rendered strategy."""
        if self.use_browser:
            return max(1, self.concurrency // 2)
        return self.concurrency


class CrawlTaskResponse(BaseModel):
    """Response schema for a started crawl task."""
    task_id: str
    status: str
    message: str


class CrawlStatusResponse(BaseModel):
    """Response schema for crawl status."""
    task_id: str
    status: str
    stats: Dict[str, int] = Field(default_factory=dict)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None
