"""
Fetch transport: the page fetcher contract and the static HTTP fetcher.
"""
import logging
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import httpx

from newswatch.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml", "text/xml", "application/xml")


class FetchStrategy(str, Enum):
    """How pages are turned into a DOM."""
    STATIC = "static"
    RENDERED = "rendered"


@dataclass
class CrawlResult:
    """Result of a single fetch operation."""
    url: str
    success: bool
    status_code: Optional[int] = None
    content: Optional[str] = None
    loaded_url: Optional[str] = None
    error: Optional[str] = None
    response_time_ms: Optional[float] = None


class UserAgentRotator:
    """Rotates through a list of user agents."""

    def __init__(self, user_agents: List[str], rotate: bool = True):
        self.user_agents = user_agents
        self.rotate = rotate
        self._index = 0

    def get_user_agent(self) -> str:
        """Get a user agent string."""
        if not self.user_agents:
            return "Mozilla/5.0 (compatible; newswatch/0.1)"

        if self.rotate:
            return random.choice(self.user_agents)

        ua = self.user_agents[self._index]
        self._index = (self._index + 1) % len(self.user_agents)
        return ua


class PageFetcher(ABC):
    """
    A capability that loads a URL and returns its HTML.

    Fetchers are async context managers; ``fetch`` never raises for
    network or HTTP failures and reports them in the ``CrawlResult``.
    """

    strategy: FetchStrategy = FetchStrategy.STATIC
    # Upper bound for fetching plus processing one frontier entry.
    handler_timeout_seconds: float = 60.0

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self) -> None:
        """Acquire resources needed for fetching."""

    async def close(self) -> None:
        """Release fetcher resources."""

    @abstractmethod
    async def fetch(self, url: str) -> CrawlResult:
        """
        Fetch a URL.

        Args:
            url: The URL to fetch

        Returns:
            CrawlResult with the HTML or error information
        """
        pass


class StaticFetcher(PageFetcher):
    """Plain HTTP fetcher built on ``httpx.AsyncClient``."""

    strategy = FetchStrategy.STATIC

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.handler_timeout_seconds = self.settings.STATIC_FETCH_TIMEOUT_SECONDS
        self.ua_rotator = UserAgentRotator(self.settings.USER_AGENTS)
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        """Initialize the HTTP client."""
        timeout = self.settings.STATIC_FETCH_TIMEOUT_SECONDS
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=self.settings.CONNECT_TIMEOUT_SECONDS,
                read=timeout,
                write=timeout,
                pool=timeout,
            ),
            follow_redirects=True,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers with rotated user agent."""
        return {
            "User-Agent": self.ua_rotator.get_user_agent(),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def fetch(self, url: str) -> CrawlResult:
        if not self._client:
            raise RuntimeError("Fetcher not started. Use 'async with' or call start()")

        start_time = time.monotonic()
        try:
            response = await self._client.get(url, headers=self._get_headers())
        except httpx.TimeoutException as e:
            return CrawlResult(url=url, success=False, error=f"Timeout: {e}")
        except httpx.HTTPError as e:
            return CrawlResult(url=url, success=False, error=f"Request error: {e}")
        response_time = (time.monotonic() - start_time) * 1000

        if not response.is_success:
            return CrawlResult(
                url=url,
                success=False,
                status_code=response.status_code,
                error=f"HTTP {response.status_code}",
                response_time_ms=response_time,
            )

        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if content_type and content_type not in HTML_CONTENT_TYPES:
            return CrawlResult(
                url=url,
                success=False,
                status_code=response.status_code,
                error=f"Unsupported content type: {content_type}",
                response_time_ms=response_time,
            )

        return CrawlResult(
            url=url,
            success=True,
            status_code=response.status_code,
            content=response.text,
            loaded_url=str(response.url),
            response_time_ms=response_time,
        )
