"""
Topic news crawler: feed ingestion, link discovery, article extraction and
deduplicated persistence.
"""
from newswatch.crawler.base import CrawlResult, FetchStrategy, PageFetcher, StaticFetcher
from newswatch.crawler.deduplication import DeduplicationConfig, DeduplicationService, DedupPolicy
from newswatch.crawler.feeds import FeedIngestor, FeedReader
from newswatch.crawler.frontier import Frontier
from newswatch.crawler.keywords import KeywordMatcher
from newswatch.crawler.links import LinkDiscoverer, LinkDiscoveryConfig, looks_like_article
from newswatch.crawler.orchestrator import CrawlOrchestrator
from newswatch.crawler.parser import NewsParser, ParsedArticle, ParserConfig
from newswatch.crawler.pipeline import RecordPipeline, SaveOutcome
from newswatch.crawler.records import CrawlStats, FrontierEntry, FullArticle, Record, UserData
from newswatch.crawler.sentiment import SentimentScorer

__all__ = [
    "CrawlResult",
    "FetchStrategy",
    "PageFetcher",
    "StaticFetcher",
    "DeduplicationConfig",
    "DeduplicationService",
    "DedupPolicy",
    "FeedIngestor",
    "FeedReader",
    "Frontier",
    "KeywordMatcher",
    "LinkDiscoverer",
    "LinkDiscoveryConfig",
    "looks_like_article",
    "CrawlOrchestrator",
    "NewsParser",
    "ParsedArticle",
    "ParserConfig",
    "RecordPipeline",
    "SaveOutcome",
    "CrawlStats",
    "FrontierEntry",
    "FullArticle",
    "Record",
    "UserData",
    "SentimentScorer",
]
