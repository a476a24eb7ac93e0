"""
Unit tests for deduplication and the record save path.
"""
import asyncio

import pytest

from newswatch.crawler.deduplication import DeduplicationConfig, DeduplicationService, DedupPolicy
from newswatch.crawler.pipeline import RecordPipeline, SaveOutcome
from newswatch.crawler.records import FullArticle, Record
from newswatch.crawler.sentiment import SentimentScorer
from newswatch.crawler.storage import InMemoryObjectStore, InMemoryRecordSink, ObjectStore


class YieldingRecordSink(InMemoryRecordSink):
    """Gives up the event loop before each write so concurrent saves interleave."""

    async def write(self, record):
        await asyncio.sleep(0)
        await super().write(record)


class FailingObjectStore(ObjectStore):
    async def put(self, key, value):
        raise OSError("disk full")


def _record(url="https://example.com/news/a", title="Title", summary=""):
    return Record(title=title, source="example.com", url=url, summary=summary)


class TestDeduplicationService:
    """Tests for DeduplicationService."""

    def test_url_key_is_trimmed(self):
        service = DeduplicationService()
        assert service.compute_key(_record(url="  https://example.com/a ")) == "https://example.com/a"

    def test_title_key_is_trimmed_and_lowercased(self):
        service = DeduplicationService(DeduplicationConfig(policy=DedupPolicy.TITLE))
        assert service.compute_key(_record(title="  Storm UPDATE ")) == "storm update"

    def test_missing_url_gives_empty_key(self):
        service = DeduplicationService()
        assert service.compute_key(_record(url=None)) == ""

    @pytest.mark.asyncio
    async def test_add_if_absent(self):
        service = DeduplicationService()
        record = _record()

        assert await service.add_if_absent(record) is True
        assert await service.add_if_absent(record) is False
        assert await service.add_if_absent(_record(url="https://example.com/news/b")) is True

    @pytest.mark.asyncio
    async def test_concurrent_inserts_have_one_winner(self):
        service = DeduplicationService()
        results = await asyncio.gather(*(service.add_if_absent(_record()) for _ in range(20)))
        assert results.count(True) == 1


class TestRecordPipeline:
    """Tests for RecordPipeline."""

    @pytest.mark.asyncio
    async def test_first_record_is_saved(self):
        # Arrange
        sink = InMemoryRecordSink()
        pipeline = RecordPipeline(DeduplicationService(), sink)

        # Act
        outcome = await pipeline.save(_record())

        # Assert
        assert outcome == SaveOutcome.SAVED
        assert len(sink.records) == 1
        assert pipeline.stats.records_saved == 1

    @pytest.mark.asyncio
    async def test_duplicate_has_no_side_effects(self):
        sink = InMemoryRecordSink()
        pipeline = RecordPipeline(DeduplicationService(), sink)
        await pipeline.save(_record(title="First"))

        outcome = await pipeline.save(_record(title="Second"))

        assert outcome == SaveOutcome.DUPLICATE
        assert [r.title for r in sink.records] == ["First"]
        assert pipeline.stats.duplicates_skipped == 1

    @pytest.mark.asyncio
    async def test_concurrent_saves_of_same_url_write_once(self):
        # Arrange
        sink = YieldingRecordSink()
        pipeline = RecordPipeline(DeduplicationService(), sink)
        workers = 25

        # Act
        outcomes = await asyncio.gather(*(pipeline.save(_record()) for _ in range(workers)))

        # Assert
        assert outcomes.count(SaveOutcome.SAVED) == 1
        assert outcomes.count(SaveOutcome.DUPLICATE) == workers - 1
        assert len(sink.records) == 1
        assert pipeline.stats.records_saved == 1
        assert pipeline.stats.duplicates_skipped == workers - 1

    @pytest.mark.asyncio
    async def test_concurrent_saves_of_same_title_write_once(self):
        sink = YieldingRecordSink()
        service = DeduplicationService(DeduplicationConfig(policy=DedupPolicy.TITLE))
        pipeline = RecordPipeline(service, sink)

        outcomes = await asyncio.gather(*(
            pipeline.save(_record(url=f"https://example.com/news/{i}", title=" Storm Update "))
            for i in range(10)
        ))

        assert outcomes.count(SaveOutcome.SAVED) == 1
        assert len(sink.records) == 1

    @pytest.mark.asyncio
    async def test_sentiment_is_attached_before_write(self):
        sink = InMemoryRecordSink()
        scorer = SentimentScorer(polarity=lambda text: 0.5)
        pipeline = RecordPipeline(DeduplicationService(), sink, sentiment_scorer=scorer)

        await pipeline.save(_record(summary="Good news for farmers"))

        saved = sink.records[0]
        assert saved.sentiment_score == 0.5
        assert saved.sentiment.comparative == pytest.approx(0.125)
        assert saved.sentiment.tokens == ("good", "news", "for", "farmers")

    @pytest.mark.asyncio
    async def test_sentiment_failure_still_emits_record(self):
        def broken(text):
            raise RuntimeError("analyzer crashed")

        sink = InMemoryRecordSink()
        pipeline = RecordPipeline(DeduplicationService(), sink, sentiment_scorer=SentimentScorer(broken))

        outcome = await pipeline.save(_record(summary="Anything"))

        assert outcome == SaveOutcome.SAVED
        assert sink.records[0].sentiment_score is None
        assert sink.records[0].sentiment is None

    @pytest.mark.asyncio
    async def test_no_sentiment_without_scorer(self):
        sink = InMemoryRecordSink()
        pipeline = RecordPipeline(DeduplicationService(), sink)

        await pipeline.save(_record(summary="Good news"))

        assert sink.records[0].sentiment_score is None

    @pytest.mark.asyncio
    async def test_store_full_article_uses_encoded_key(self):
        store = InMemoryObjectStore()
        pipeline = RecordPipeline(DeduplicationService(), InMemoryRecordSink(), object_store=store)
        article = FullArticle(title="T", author="A", published_at="2024-01-01", text="Body")

        stored = await pipeline.store_full_article("https://example.com/news/a?b=1", article)

        assert stored is True
        assert store.objects == {
            "articles/https%3A%2F%2Fexample.com%2Fnews%2Fa%3Fb%3D1": {
                "title": "T", "author": "A", "published_at": "2024-01-01", "text": "Body",
            }
        }
        assert pipeline.stats.articles_stored == 1

    @pytest.mark.asyncio
    async def test_store_failure_is_not_fatal(self):
        pipeline = RecordPipeline(DeduplicationService(), InMemoryRecordSink(), object_store=FailingObjectStore())
        article = FullArticle(title="T", author="", published_at="", text="Body")

        stored = await pipeline.store_full_article("https://example.com/a", article)

        assert stored is False
        assert pipeline.stats.article_store_failures == 1
