"""
Article page parser for extracting metadata and body text from HTML.

One extraction algorithm serves both fetch strategies: static responses
and rendered page snapshots are both parsed into BeautifulSoup first.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

from newswatch.crawler.keywords import KeywordMatcher
from newswatch.crawler.records import (
    SUMMARY_MAX_LENGTH,
    TEXT_MAX_LENGTH,
    FullArticle,
    Record,
    utc_now_iso,
)
from newswatch.crawler.urls import url_hostname

_WHITESPACE = re.compile(r"\s+")


@dataclass
class ParserConfig:
    """Selectors and thresholds used by the fallback chains."""
    content_selector: str = "article, .article-body, .post-content"
    content_paragraph_selectors: List[str] = field(default_factory=lambda: [
        "article p", ".article-body p", ".post-content p",
    ])
    author_selector: str = "[rel='author']"
    min_meta_summary_length: int = 20
    min_paragraph_summary_length: int = 40
    max_fallback_paragraphs: int = 20


@dataclass(frozen=True)
class ParsedArticle:
    """Parsed article page."""
    record: Record
    article: FullArticle


def _meta(soup: BeautifulSoup, attr: str, value: str) -> str:
    element = soup.find("meta", attrs={attr: value})
    if element is None:
        return ""
    return (element.get("content") or "").strip()


def _text(soup: BeautifulSoup, selector: str) -> str:
    element = soup.select_one(selector)
    return collapse_whitespace(element.get_text()) if element else ""


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


class NewsParser:
    """
    HTML parser for article pages.

    Each field is resolved with an ordered fallback chain; the first
    non-empty candidate wins.
    """

    def __init__(
        self,
        keyword_matcher: Optional[KeywordMatcher] = None,
        config: Optional[ParserConfig] = None,
    ):
        self.keyword_matcher = keyword_matcher or KeywordMatcher()
        self.config = config or ParserConfig()

    def parse(self, html: str, url: str) -> ParsedArticle:
        """
        Parse HTML content into a record and its full article.

        Args:
            html: The HTML content
            url: The resolved page URL

        Returns:
            ParsedArticle with the record and the full article body
        """
        return self.parse_soup(BeautifulSoup(html, "html.parser"), url)

    def parse_soup(self, soup: BeautifulSoup, url: str) -> ParsedArticle:
        title = self._extract_title(soup)
        author = self._extract_author(soup)
        published_at = self._extract_published_at(soup)
        summary = self._extract_summary(soup)
        tags = self._extract_tags(soup)
        text = self._extract_text(soup)

        record = Record(
            title=title,
            source=url_hostname(url),
            published_at=published_at,
            author=author,
            summary=summary,
            tags=tags,
            keywords_matched=tuple(self.keyword_matcher.match(f"{title}\n{summary}\n{text}")),
            url=url,
            extracted_at=utc_now_iso(),
        )
        article = FullArticle(title=title, author=author, published_at=published_at, text=text)
        return ParsedArticle(record=record, article=article)

    def _extract_title(self, soup: BeautifulSoup) -> str:
        """og:title, then the first <h1>, then the document title."""
        return (
            _meta(soup, "property", "og:title")
            or _text(soup, "h1")
            or (collapse_whitespace(soup.title.get_text()) if soup.title else "")
        )

    def _extract_author(self, soup: BeautifulSoup) -> str:
        return _meta(soup, "name", "author") or _text(soup, self.config.author_selector)

    def _extract_published_at(self, soup: BeautifulSoup) -> str:
        published = _meta(soup, "property", "article:published_time")
        if published:
            return published
        time_element = soup.find("time")
        if time_element is not None:
            return (time_element.get("datetime") or "").strip()
        return ""

    def _extract_summary(self, soup: BeautifulSoup) -> str:
        """
        Meta description, then og:description, then the first long
        paragraph (content containers first, then anywhere).
        """
        for candidate in (
            _meta(soup, "name", "description"),
            _meta(soup, "property", "og:description"),
        ):
            if len(candidate) > self.config.min_meta_summary_length:
                return candidate[:SUMMARY_MAX_LENGTH]

        for selector in (*self.config.content_paragraph_selectors, "p"):
            for p in soup.select(selector):
                text = p.get_text().strip()
                if len(text) > self.config.min_paragraph_summary_length:
                    return text[:SUMMARY_MAX_LENGTH]
        return ""

    def _extract_tags(self, soup: BeautifulSoup) -> Tuple[str, ...]:
        keywords = _meta(soup, "name", "keywords")
        if not keywords:
            return ()
        return tuple(tag.strip() for tag in keywords.split(",") if tag.strip())

    def _extract_text(self, soup: BeautifulSoup) -> str:
        """First content container's text, else the first paragraphs."""
        container = soup.select_one(self.config.content_selector)
        if container is not None:
            return collapse_whitespace(container.get_text(" "))[:TEXT_MAX_LENGTH]

        paragraphs = []
        for p in soup.find_all("p"):
            text = p.get_text().strip()
            if text:
                paragraphs.append(text)
            if len(paragraphs) >= self.config.max_fallback_paragraphs:
                break
        return "\n\n".join(paragraphs)[:TEXT_MAX_LENGTH]
