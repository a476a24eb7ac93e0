"""
Command-line entry point: run one crawl from a JSON input file.

Usage:
    newswatch-crawl --input input.json [--storage-dir storage]
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from pydantic import ValidationError

from newswatch.core.config import get_settings
from newswatch.crawler.orchestrator import CrawlOrchestrator
from newswatch.crawler.storage import build_object_store, build_record_sink
from newswatch.schemas.crawler import CrawlInput

logger = logging.getLogger(__name__)


async def run_crawl(options: CrawlInput, storage_dir: Optional[str] = None) -> dict:
    """Run one crawl with the configured storage back-ends."""
    settings = get_settings()
    if storage_dir:
        settings = settings.model_copy(update={"STORAGE_DIR": storage_dir})

    orchestrator = CrawlOrchestrator(
        options,
        sink=build_record_sink(settings),
        object_store=build_object_store(settings),
        settings=settings,
    )
    try:
        stats = await orchestrator.run()
    finally:
        await orchestrator.sink.close()
        await orchestrator.object_store.close()
    return stats.to_dict()


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Crawl feeds and sites for topic articles")
    parser.add_argument("--input", required=True, help="Path to a JSON crawl input file")
    parser.add_argument("--storage-dir", help="Override STORAGE_DIR for records and articles")
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        with open(args.input, "r", encoding="utf-8") as f:
            options = CrawlInput.model_validate(json.load(f))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Invalid crawl input {args.input}: {e}")
        return 2

    stats = asyncio.run(run_crawl(options, storage_dir=args.storage_dir))
    json.dump(stats, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
