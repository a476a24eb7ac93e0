"""
Unit tests for keyword matching.
"""
from newswatch.crawler.keywords import KeywordMatcher


class TestKeywordMatcher:
    """Tests for KeywordMatcher."""

    def test_matches_case_insensitively(self):
        matcher = KeywordMatcher(["Climate", "carbon"])
        assert matcher.match("CLIMATE policy and Carbon taxes") == ["Climate", "carbon"]

    def test_preserves_configuration_order(self):
        matcher = KeywordMatcher(["warming", "climate"])
        assert matcher.match("climate change drives warming") == ["warming", "climate"]

    def test_substring_matches(self):
        matcher = KeywordMatcher(["heat"])
        assert matcher.match("Heatwaves hit Europe") == ["heat"]

    def test_duplicate_keywords_are_reported_twice(self):
        matcher = KeywordMatcher(["ice", "ice"])
        assert matcher.match("sea ice") == ["ice", "ice"]

    def test_empty_text_or_keywords(self):
        assert KeywordMatcher(["climate"]).match("") == []
        assert KeywordMatcher([]).match("climate") == []
        assert KeywordMatcher(None).match("climate") == []

    def test_blank_keywords_are_ignored(self):
        matcher = KeywordMatcher(["", "flood"])
        assert matcher.match("flood warnings") == ["flood"]
