"""
Crawler service for launching and tracking crawl runs.
"""
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from newswatch.core.config import Settings, get_settings
from newswatch.crawler.orchestrator import CrawlOrchestrator
from newswatch.crawler.records import CrawlStats
from newswatch.crawler.storage import build_object_store, build_record_sink
from newswatch.schemas.crawler import CrawlInput

logger = logging.getLogger(__name__)


class CrawlerStatus(str, Enum):
    """Crawl task status."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CrawlTask:
    """Represents a crawl run with its state."""

    def __init__(self, task_id: str, options: CrawlInput):
        self.task_id = task_id
        self.options = options
        self.status = CrawlerStatus.PENDING
        self.stats = CrawlStats()
        self.started_at: Optional[datetime] = None
        self.completed_at: Optional[datetime] = None
        self.error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "task_id": self.task_id,
            "status": self.status.value,
            "stats": self.stats.to_dict(),
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "error_message": self.error_message,
        }


OrchestratorFactory = Callable[[CrawlInput, Settings], CrawlOrchestrator]


def default_orchestrator_factory(options: CrawlInput, settings: Settings) -> CrawlOrchestrator:
    """Build an orchestrator writing to the configured storage back-ends."""
    return CrawlOrchestrator(
        options,
        sink=build_record_sink(settings),
        object_store=build_object_store(settings),
        settings=settings,
    )


class CrawlerService:
    """
    Service for managing crawl runs.

    Each run executes as a background asyncio task; its ``CrawlStats``
    object is shared with the task so progress is visible while running.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        orchestrator_factory: Optional[OrchestratorFactory] = None,
    ):
        self.settings = settings or get_settings()
        self._factory = orchestrator_factory or default_orchestrator_factory
        self._tasks: Dict[str, CrawlTask] = {}
        self._background: Dict[str, asyncio.Task] = {}

    def start_crawl(self, options: CrawlInput) -> CrawlTask:
        """
        Start a crawl run in the background.

        Args:
            options: Crawl input for the run

        Returns:
            CrawlTask object
        """
        task = CrawlTask(task_id=str(uuid.uuid4()), options=options)
        self._tasks[task.task_id] = task
        self._background[task.task_id] = asyncio.create_task(self._run_crawl(task))
        return task

    async def _run_crawl(self, task: CrawlTask) -> None:
        """
        Run the crawl and record its outcome.

        Args:
            task: The crawl task
        """
        task.status = CrawlerStatus.RUNNING
        task.started_at = _utcnow()
        orchestrator: Optional[CrawlOrchestrator] = None

        try:
            orchestrator = self._factory(task.options, self.settings)
            task.stats = orchestrator.stats
            await orchestrator.run()
            task.status = CrawlerStatus.COMPLETED
        except Exception as e:
            logger.exception(f"Crawl task {task.task_id} failed")
            task.status = CrawlerStatus.FAILED
            task.error_message = str(e)
        finally:
            task.completed_at = _utcnow()
            if orchestrator is not None:
                await orchestrator.sink.close()
                await orchestrator.object_store.close()
            self._background.pop(task.task_id, None)

    async def wait(self, task_id: str) -> Optional[CrawlTask]:
        """Wait for a running task to finish."""
        background = self._background.get(task_id)
        if background is not None:
            await background
        return self._tasks.get(task_id)

    def get_task_status(self, task_id: str) -> Optional[CrawlTask]:
        """
        Get the status of a crawl task.

        Args:
            task_id: ID of the task

        Returns:
            CrawlTask or None
        """
        return self._tasks.get(task_id)

    def get_all_tasks(self) -> List[CrawlTask]:
        """Get all crawl tasks."""
        return list(self._tasks.values())

    def cleanup_old_tasks(self, max_age_hours: int = 24) -> int:
        """
        Remove old finished tasks.

        Args:
            max_age_hours: Maximum age in hours

        Returns:
            Number of tasks removed
        """
        now = _utcnow()
        to_remove = [
            task_id
            for task_id, task in self._tasks.items()
            if task.completed_at
            and (now - task.completed_at).total_seconds() / 3600 > max_age_hours
        ]

        for task_id in to_remove:
            del self._tasks[task_id]

        return len(to_remove)


# Global service instance
crawler_service = CrawlerService()
