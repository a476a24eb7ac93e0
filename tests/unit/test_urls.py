"""
Unit tests for URL helpers.
"""
import pytest

from newswatch.crawler.urls import (
    article_store_key,
    is_absolute_http_url,
    normalize_url,
    resolve_url,
    url_host,
    url_hostname,
)


class TestResolveUrl:

    def test_resolves_relative_href(self):
        assert resolve_url("https://example.com/news/", "story-one") == "https://example.com/news/story-one"
        assert resolve_url("https://example.com/news/", "/about") == "https://example.com/about"

    def test_keeps_absolute_href(self):
        assert resolve_url("https://example.com/", "https://other.org/a") == "https://other.org/a"

    @pytest.mark.parametrize("href", ["", "mailto:desk@example.com", "javascript:void(0)", "http://[broken/"])
    def test_unresolvable_hrefs_return_none(self, href):
        assert resolve_url("https://example.com/", href) is None


class TestHosts:

    def test_url_host_keeps_non_default_port(self):
        assert url_host("https://Example.com:8443/a") == "example.com:8443"
        assert url_host("https://example.com:443/a") == "example.com"
        assert url_host("http://example.com/a") == "example.com"

    def test_url_host_of_garbage_is_none(self):
        assert url_host("") is None
        assert url_host("not a url") is None
        assert url_host("http://[broken/") is None

    def test_url_hostname(self):
        assert url_hostname("https://News.Example.com:8080/x") == "news.example.com"
        assert url_hostname("") == ""
        assert url_hostname("http://[broken/") == ""

    def test_is_absolute_http_url(self):
        assert is_absolute_http_url("https://example.com/a")
        assert not is_absolute_http_url("ftp://example.com/a")
        assert not is_absolute_http_url("/relative")
        assert not is_absolute_http_url(None)


class TestNormalizeAndKeys:

    def test_normalize_drops_fragment_and_lowercases_host(self):
        assert normalize_url(" HTTPS://Example.COM/Path?q=1#top ") == "https://example.com/Path?q=1"

    def test_article_store_key_matches_encode_uri_component(self):
        key = article_store_key("https://example.com/a b?x=1&y=(2)")
        assert key == "articles/https%3A%2F%2Fexample.com%2Fa%20b%3Fx%3D1%26y%3D(2)"
