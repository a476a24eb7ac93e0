"""
Shared save path for every record, feed-derived or crawl-derived.
"""
import dataclasses
import logging
from enum import Enum
from typing import Optional

from newswatch.crawler.deduplication import DeduplicationService
from newswatch.crawler.records import CrawlStats, FullArticle, Record, SentimentInfo
from newswatch.crawler.sentiment import SentimentScorer
from newswatch.crawler.storage import ObjectStore, RecordSink
from newswatch.crawler.urls import article_store_key

logger = logging.getLogger(__name__)


class SaveOutcome(str, Enum):
    SAVED = "saved"
    DUPLICATE = "duplicate"


class RecordPipeline:
    """
    The single gate between producers and the record sink.

    ``save`` checks the dedup set, attaches sentiment, then writes. A
    duplicate has no side effects at all.
    """

    def __init__(
        self,
        deduplicator: DeduplicationService,
        sink: RecordSink,
        object_store: Optional[ObjectStore] = None,
        sentiment_scorer: Optional[SentimentScorer] = None,
        stats: Optional[CrawlStats] = None,
    ):
        self.deduplicator = deduplicator
        self.sink = sink
        self.object_store = object_store
        self.sentiment_scorer = sentiment_scorer
        self.stats = stats if stats is not None else CrawlStats()

    async def save(self, record: Record) -> SaveOutcome:
        if not await self.deduplicator.add_if_absent(record):
            self.stats.duplicates_skipped += 1
            logger.debug(f"Duplicate skipped: {self.deduplicator.compute_key(record)!r}")
            return SaveOutcome.DUPLICATE

        if self.sentiment_scorer is not None:
            record = self._with_sentiment(record)

        await self.sink.write(record)
        self.stats.records_saved += 1
        return SaveOutcome.SAVED

    def _with_sentiment(self, record: Record) -> Record:
        result = self.sentiment_scorer.score(record)
        if result is None:
            return dataclasses.replace(record, sentiment_score=None, sentiment=None)
        return dataclasses.replace(
            record,
            sentiment_score=result.score,
            sentiment=SentimentInfo(comparative=result.comparative, tokens=result.tokens),
        )

    async def store_full_article(self, url: str, article: FullArticle) -> bool:
        """
        Persist a full article under ``articles/<encoded url>``.

        Failures are logged and reported as False; they never affect
        record emission or dedup state.
        """
        if self.object_store is None:
            return False
        key = article_store_key(url)
        try:
            await self.object_store.put(key, article.to_dict())
        except Exception as e:
            self.stats.article_store_failures += 1
            logger.warning(f"Object store write failed for {url}: {e}")
            return False
        self.stats.articles_stored += 1
        return True
