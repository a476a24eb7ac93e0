"""
Single-run deduplication of emitted records.
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Set

from newswatch.crawler.records import Record


class DedupPolicy(str, Enum):
    """Which record field identifies an article."""
    URL = "url"
    TITLE = "title"


@dataclass
class DeduplicationConfig:
    """Configuration for deduplication."""
    policy: DedupPolicy = DedupPolicy.URL


class DeduplicationService:
    """
    Membership set of dedup keys seen in the current run.

    The set is never pruned while the run lives. ``add_if_absent`` is the
    only mutation and runs under a lock, so two workers racing on the same
    key cannot both win.
    """

    def __init__(self, config: Optional[DeduplicationConfig] = None):
        self.config = config or DeduplicationConfig()
        self._seen: Set[str] = set()
        self._lock = asyncio.Lock()

    def compute_key(self, record: Record) -> str:
        """
        Compute the dedup key for a record.

        ``url`` policy: trimmed URL. ``title`` policy: trimmed, lowercased title.
        """
        if self.config.policy == DedupPolicy.TITLE:
            return (record.title or "").strip().lower()
        return (record.url or "").strip()

    async def add_if_absent(self, record: Record) -> bool:
        """
        Insert the record's key.

        Returns:
            True if the key was new, False if it had already been seen
        """
        key = self.compute_key(record)
        async with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True
