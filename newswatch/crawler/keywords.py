"""
Keyword matching against free text.
"""
from typing import Iterable, List, Optional


class KeywordMatcher:
    """
    Case-insensitive substring matcher for the configured topic keywords.

    Matches are returned in configuration order. Keywords are not
    deduplicated, so a keyword listed twice is reported twice.
    """

    def __init__(self, keywords: Optional[Iterable[str]] = None):
        self.keywords: List[str] = [k for k in (keywords or []) if k]
        self._lowered = [k.lower() for k in self.keywords]

    def match(self, text: str) -> List[str]:
        """Return the keywords contained in ``text``."""
        if not text:
            return []
        lowered = text.lower()
        return [
            keyword
            for keyword, needle in zip(self.keywords, self._lowered)
            if needle in lowered
        ]
