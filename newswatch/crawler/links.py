"""
Link discovery: turn a page's anchors into new frontier entries.
"""
import logging
import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from newswatch.crawler.records import FrontierEntry, UserData
from newswatch.crawler.urls import resolve_url, url_host

logger = logging.getLogger(__name__)

# Section names, a 2020s year segment, or a /YYYY/MM/DD/ date path.
ARTICLE_PATH_PATTERN = re.compile(
    r"/(news|article|story|202[0-9])|/\d{4}/\d{2}/\d{2}/",
    re.IGNORECASE,
)
# Final path segment with a hyphen-joined slug.
SLUG_PATTERN = re.compile(r"/[^/]+-[^/]+$", re.IGNORECASE)


def looks_like_article(url: str) -> bool:
    """
    Guess from its path whether a URL points to an article rather than a
    listing or navigation page.

    The guess favours recall: some listing pages pass, and some articles
    with unusual paths are dropped.
    """
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    return bool(ARTICLE_PATH_PATTERN.search(path) or SLUG_PATTERN.search(path))


@dataclass
class LinkDiscoveryConfig:
    """Configuration for link discovery."""
    follow_internal_only: bool = True
    max_anchors_per_page: int = 500


class LinkDiscoverer:
    """Scans anchors, resolves them and keeps article-shaped URLs."""

    def __init__(self, config: Optional[LinkDiscoveryConfig] = None):
        self.config = config or LinkDiscoveryConfig()

    @staticmethod
    def extract_anchors(soup: BeautifulSoup) -> List[str]:
        """Raw href values of all anchors, in document order."""
        return [a.get("href") for a in soup.select("a[href]") if a.get("href")]

    def discover(
        self,
        anchors: List[str],
        entry: FrontierEntry,
        loaded_url: Optional[str] = None,
    ) -> List[FrontierEntry]:
        """
        Select frontier candidates from a page's anchors.

        Args:
            anchors: Raw href strings from the page, in document order
            entry: The frontier entry the page was fetched for
            loaded_url: URL after redirects, if different

        Returns:
            New frontier entries carrying the inherited start host
        """
        start_host = entry.user_data.start_host
        # Only checked when the entry already recorded a start host.
        check_host = self.config.follow_internal_only and bool(start_host)
        inherited_host = start_host or url_host(loaded_url or entry.url)

        found: List[FrontierEntry] = []
        for href in anchors[: self.config.max_anchors_per_page]:
            absolute = resolve_url(entry.url, href)
            if not absolute:
                continue
            if check_host and url_host(absolute) != start_host:
                continue
            if not looks_like_article(absolute):
                continue
            found.append(FrontierEntry(url=absolute, user_data=UserData(start_host=inherited_host)))

        logger.debug(f"Discovered {len(found)} candidate links on {entry.url}")
        return found
