"""
Crawl frontier: the queue of URLs pending fetch.
"""
import asyncio
import logging
from collections import deque
from typing import Deque, Optional, Set

from newswatch.crawler.records import FrontierEntry
from newswatch.crawler.urls import is_absolute_http_url, normalize_url

logger = logging.getLogger(__name__)


class Frontier:
    """
    FIFO queue of frontier entries shared by all fetch workers.

    URLs are deduplicated at the queue level: adding a URL that was ever
    queued is a no-op. ``max_requests`` bounds the number of entries
    handed out over the run; once reached, ``next`` returns None while
    entries already handed out finish normally.
    """

    def __init__(self, max_requests: int):
        self.max_requests = max_requests
        self._queue: Deque[FrontierEntry] = deque()
        self._seen: Set[str] = set()
        self._handed_out = 0
        self._in_progress = 0
        self._condition = asyncio.Condition()

    @property
    def handed_out(self) -> int:
        return self._handed_out

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def budget_exhausted(self) -> bool:
        return self._handed_out >= self.max_requests

    async def add(self, entry: FrontierEntry) -> bool:
        """
        Enqueue an entry.

        Returns:
            True if queued, False if the URL was already known or invalid
        """
        if not is_absolute_http_url(entry.url):
            logger.debug(f"Rejected non-http URL: {entry.url!r}")
            return False
        key = normalize_url(entry.url)
        async with self._condition:
            if key in self._seen:
                return False
            self._seen.add(key)
            self._queue.append(entry)
            self._condition.notify()
            return True

    async def next(self) -> Optional[FrontierEntry]:
        """
        Hand out the next entry, waiting while other workers may still
        enqueue more.

        Returns None when the budget is exhausted, or when the queue is
        empty and no entry is in progress.
        """
        async with self._condition:
            while True:
                if self.budget_exhausted:
                    return None
                if self._queue:
                    self._handed_out += 1
                    self._in_progress += 1
                    return self._queue.popleft()
                if self._in_progress == 0:
                    return None
                await self._condition.wait()

    async def task_done(self) -> None:
        """Mark an entry returned by ``next`` as fully processed."""
        async with self._condition:
            self._in_progress -= 1
            self._condition.notify_all()
