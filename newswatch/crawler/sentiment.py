"""
Lightweight sentiment signal for emitted records.
"""
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from textblob import TextBlob

from newswatch.crawler.records import SENTIMENT_MAX_TOKENS, Record

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s'-]+")


@dataclass(frozen=True)
class SentimentResult:
    """Output of a sentiment analysis."""
    score: float
    comparative: float
    tokens: Tuple[str, ...]


def tokenize(text: str) -> List[str]:
    """Lowercase, strip punctuation and split on whitespace."""
    return _NON_WORD.sub(" ", text.lower()).split()


def textblob_polarity(text: str) -> float:
    """Polarity in [-1.0, 1.0] from TextBlob's pattern analyzer."""
    return TextBlob(text).sentiment.polarity


class SentimentScorer:
    """
    Attaches a polarity score to records.

    ``comparative`` is the score divided by the token count, so long and
    short texts with the same polarity are distinguishable.
    """

    def __init__(self, polarity: Optional[Callable[[str], float]] = None):
        self._polarity = polarity or textblob_polarity

    @staticmethod
    def text_for(record: Record) -> str:
        return record.summary or record.title or ""

    def analyze(self, text: str) -> SentimentResult:
        tokens = tokenize(text)
        score = float(self._polarity(text)) if text else 0.0
        comparative = score / len(tokens) if tokens else 0.0
        return SentimentResult(
            score=score,
            comparative=comparative,
            tokens=tuple(tokens[:SENTIMENT_MAX_TOKENS]),
        )

    def score(self, record: Record) -> Optional[SentimentResult]:
        """
        Analyze a record's summary (else title).

        Returns None when the analyzer fails; the record is still emitted.
        """
        try:
            return self.analyze(self.text_for(record))
        except Exception as e:
            logger.warning(f"Sentiment scoring failed for {record.url or record.title!r}: {e}")
            return None
