"""
Crawler API endpoints for launching crawl runs and reading their status.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from newswatch.schemas.crawler import CrawlInput, CrawlStatusResponse, CrawlTaskResponse
from newswatch.services.crawler import CrawlerService, CrawlTask, crawler_service

router = APIRouter(prefix="/crawler", tags=["crawler"])


def get_crawler_service() -> CrawlerService:
    """Dependency returning the process-wide crawler service."""
    return crawler_service


def _status_response(task: CrawlTask) -> CrawlStatusResponse:
    return CrawlStatusResponse(
        task_id=task.task_id,
        status=task.status.value,
        stats=task.stats.to_dict(),
        started_at=task.started_at,
        completed_at=task.completed_at,
        error_message=task.error_message,
    )


@router.post("/start", response_model=CrawlTaskResponse, status_code=status.HTTP_202_ACCEPTED)
async def start_crawl(
    request: CrawlInput,
    service: CrawlerService = Depends(get_crawler_service),
):
    """
    Start a crawl run.

    The run executes in the background; poll the status endpoint for progress.
    """
    task = service.start_crawl(request)
    return CrawlTaskResponse(
        task_id=task.task_id,
        status=task.status.value,
        message="Crawl task started",
    )


@router.get("/status/{task_id}", response_model=CrawlStatusResponse)
async def get_crawl_status(
    task_id: str,
    service: CrawlerService = Depends(get_crawler_service),
):
    """Get the status and counters of a crawl run."""
    task = service.get_task_status(task_id)

    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task {task_id} not found",
        )

    return _status_response(task)


@router.get("/status", response_model=List[CrawlStatusResponse])
async def get_all_crawl_status(service: CrawlerService = Depends(get_crawler_service)):
    """Get status of all crawl runs."""
    return [_status_response(task) for task in service.get_all_tasks()]
