"""
Unit tests for the static HTTP fetcher.
"""
import httpx
import pytest

from newswatch.crawler.base import FetchStrategy, StaticFetcher, UserAgentRotator


def _fetcher(settings, handler):
    fetcher = StaticFetcher(settings)
    fetcher._client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
    return fetcher


def _routes(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/old":
        return httpx.Response(301, headers={"Location": "https://example.com/news/new-home"})
    if path == "/news/new-home":
        return httpx.Response(200, html="<html><h1>Moved</h1></html>")
    if path == "/feed.json":
        return httpx.Response(200, json={"not": "html"})
    if path == "/slow":
        raise httpx.ReadTimeout("read timed out", request=request)
    if path == "/down":
        raise httpx.ConnectError("connection refused", request=request)
    return httpx.Response(404, text="missing")


class TestStaticFetcher:
    """Tests for StaticFetcher."""

    def test_strategy_and_timeout(self, settings):
        fetcher = StaticFetcher(settings)
        assert fetcher.strategy == FetchStrategy.STATIC
        assert fetcher.handler_timeout_seconds == settings.STATIC_FETCH_TIMEOUT_SECONDS

    @pytest.mark.asyncio
    async def test_fetch_follows_redirects(self, settings):
        fetcher = _fetcher(settings, _routes)

        result = await fetcher.fetch("https://example.com/old")

        assert result.success is True
        assert result.status_code == 200
        assert "<h1>Moved</h1>" in result.content
        assert result.loaded_url == "https://example.com/news/new-home"
        await fetcher.close()

    @pytest.mark.asyncio
    async def test_http_error_status_is_failure(self, settings):
        fetcher = _fetcher(settings, _routes)

        result = await fetcher.fetch("https://example.com/missing")

        assert result.success is False
        assert result.status_code == 404
        assert result.error == "HTTP 404"
        await fetcher.close()

    @pytest.mark.asyncio
    async def test_non_html_is_failure(self, settings):
        fetcher = _fetcher(settings, _routes)

        result = await fetcher.fetch("https://example.com/feed.json")

        assert result.success is False
        assert "application/json" in result.error
        await fetcher.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path, prefix", [("/slow", "Timeout"), ("/down", "Request error")])
    async def test_transport_errors_are_failures(self, settings, path, prefix):
        fetcher = _fetcher(settings, _routes)

        result = await fetcher.fetch(f"https://example.com{path}")

        assert result.success is False
        assert result.error.startswith(prefix)
        await fetcher.close()

    @pytest.mark.asyncio
    async def test_sends_browser_like_headers(self, settings):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, html="<p>ok</p>")

        fetcher = _fetcher(settings, handler)
        await fetcher.fetch("https://example.com/")

        assert seen["user-agent"] in settings.USER_AGENTS
        assert "text/html" in seen["accept"]
        await fetcher.close()

    @pytest.mark.asyncio
    async def test_fetch_requires_start(self, settings):
        with pytest.raises(RuntimeError):
            await StaticFetcher(settings).fetch("https://example.com/")

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes_client(self, settings):
        fetcher = StaticFetcher(settings)
        async with fetcher:
            assert fetcher._client is not None
        assert fetcher._client is None


class TestUserAgentRotator:

    def test_sequential_rotation(self):
        rotator = UserAgentRotator(["a", "b"], rotate=False)
        assert [rotator.get_user_agent() for _ in range(3)] == ["a", "b", "a"]

    def test_fallback_agent(self):
        assert "newswatch" in UserAgentRotator([]).get_user_agent()
