"""
Crawl orchestration: feeds first, then a bounded worker pool drains the
frontier through the selected fetch strategy.
"""
import asyncio
import logging
from typing import Optional

from bs4 import BeautifulSoup

from newswatch.core.config import Settings, get_settings
from newswatch.crawler.base import PageFetcher, StaticFetcher
from newswatch.crawler.deduplication import DeduplicationConfig, DeduplicationService, DedupPolicy
from newswatch.crawler.feeds import FeedIngestor, FeedReader
from newswatch.crawler.frontier import Frontier
from newswatch.crawler.keywords import KeywordMatcher
from newswatch.crawler.links import LinkDiscoverer, LinkDiscoveryConfig
from newswatch.crawler.parser import NewsParser
from newswatch.crawler.pipeline import RecordPipeline, SaveOutcome
from newswatch.crawler.records import CrawlStats, FrontierEntry, UserData
from newswatch.crawler.sentiment import SentimentScorer
from newswatch.crawler.storage import InMemoryObjectStore, InMemoryRecordSink, ObjectStore, RecordSink
from newswatch.crawler.urls import url_host
from newswatch.schemas.crawler import CrawlInput

logger = logging.getLogger(__name__)


class CrawlOrchestrator:
    """
    Top-level driver for one crawl run.

    The orchestrator owns the run's dedup set and frontier and injects
    them into the feed ingestor and the fetch workers.
    """

    def __init__(
        self,
        options: CrawlInput,
        sink: Optional[RecordSink] = None,
        object_store: Optional[ObjectStore] = None,
        fetcher: Optional[PageFetcher] = None,
        feed_reader: Optional[FeedReader] = None,
        sentiment_scorer: Optional[SentimentScorer] = None,
        settings: Optional[Settings] = None,
    ):
        self.options = options
        self.settings = settings or get_settings()
        self.stats = CrawlStats()

        self.sink = sink or InMemoryRecordSink()
        self.object_store = object_store or InMemoryObjectStore()
        self.fetcher = fetcher or self._default_fetcher()
        self.feed_reader = feed_reader or FeedReader(self.settings)

        self.keyword_matcher = KeywordMatcher(options.keywords)
        self.deduplicator = DeduplicationService(
            DeduplicationConfig(policy=DedupPolicy(options.deduplicate_by))
        )
        if options.compute_sentiment:
            sentiment_scorer = sentiment_scorer or SentimentScorer()
        else:
            sentiment_scorer = None
        self.pipeline = RecordPipeline(
            deduplicator=self.deduplicator,
            sink=self.sink,
            object_store=self.object_store,
            sentiment_scorer=sentiment_scorer,
            stats=self.stats,
        )
        self.frontier = Frontier(max_requests=options.max_requests_per_crawl)
        self.feed_ingestor = FeedIngestor(
            reader=self.feed_reader,
            pipeline=self.pipeline,
            frontier=self.frontier,
            keyword_matcher=self.keyword_matcher,
            extract_full_article=options.extract_full_article,
            stats=self.stats,
        )
        self.link_discoverer = LinkDiscoverer(
            LinkDiscoveryConfig(follow_internal_only=options.follow_internal_only)
        )
        self.parser = NewsParser(keyword_matcher=self.keyword_matcher)

    def _default_fetcher(self) -> PageFetcher:
        if self.options.use_browser:
            # Imported lazily so static-only runs do not need a browser install.
            from newswatch.crawler.browser import RenderedFetcher

            return RenderedFetcher(self.settings)
        return StaticFetcher(self.settings)

    async def run(self) -> CrawlStats:
        """
        Run the crawl: seed, ingest feeds, then drain the frontier.

        Returns:
            Counters for the run
        """
        await self.seed_start_urls()

        async with self.feed_reader:
            await self.feed_ingestor.ingest_all(self.options.feed_urls())

        await self.drain()
        logger.info(f"Crawl finished: {self.stats.to_dict()}")
        return self.stats

    async def seed_start_urls(self) -> None:
        """Queue start URLs, each recording its own host as start host."""
        for url in self.options.start_urls:
            entry = FrontierEntry(url=url.strip(), user_data=UserData(start_host=url_host(url)))
            if not await self.frontier.add(entry):
                logger.warning(f"Start URL not queued: {url!r}")
        logger.info(f"Seeded frontier with {self.frontier.pending} start URLs")

    async def drain(self) -> None:
        """Drain the frontier with a bounded pool of fetch workers."""
        if self.frontier.pending == 0:
            return
        worker_count = self.options.worker_count
        logger.info(
            f"Draining frontier with {worker_count} {self.fetcher.strategy.value} workers "
            f"(budget {self.frontier.max_requests})"
        )
        async with self.fetcher:
            workers = [
                asyncio.create_task(self._worker(i)) for i in range(worker_count)
            ]
            await asyncio.gather(*workers)

    async def _worker(self, worker_id: int) -> None:
        while True:
            entry = await self.frontier.next()
            if entry is None:
                return
            try:
                await asyncio.wait_for(
                    self.process_entry(entry),
                    timeout=self.fetcher.handler_timeout_seconds,
                )
            except asyncio.TimeoutError:
                self.stats.pages_failed += 1
                logger.warning(f"Worker {worker_id}: timed out processing {entry.url}")
            except Exception as e:
                self.stats.pages_failed += 1
                logger.warning(f"Worker {worker_id}: failed processing {entry.url}: {e}")
            finally:
                await self.frontier.task_done()

    async def process_entry(self, entry: FrontierEntry) -> None:
        """Fetch one entry, enqueue its outbound links, then extract it."""
        result = await self.fetcher.fetch(entry.url)
        if not result.success:
            self.stats.pages_failed += 1
            logger.warning(f"Fetch failed for {entry.url}: {result.error}")
            return
        self.stats.pages_crawled += 1

        soup = BeautifulSoup(result.content or "", "html.parser")
        loaded_url = result.loaded_url or entry.url

        anchors = LinkDiscoverer.extract_anchors(soup)
        for candidate in self.link_discoverer.discover(anchors, entry, loaded_url):
            if await self.frontier.add(candidate):
                self.stats.links_enqueued += 1

        parsed = self.parser.parse_soup(soup, loaded_url)
        outcome = await self.pipeline.save(parsed.record)
        if outcome == SaveOutcome.SAVED and self.options.extract_full_article:
            await self.pipeline.store_full_article(loaded_url, parsed.article)
