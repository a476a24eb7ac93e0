import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from newswatch.api.crawler import router as crawler_router
from newswatch.core.config import get_settings
from newswatch.core.redis import RedisClient


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Topic news crawl API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(crawler_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Health check endpoint; pings Redis when it backs the object store."""
        health = {"status": "healthy", "object_store": settings.OBJECT_STORE_BACKEND}
        if settings.OBJECT_STORE_BACKEND.lower() == "redis":
            redis_client = RedisClient(settings)
            await redis_client.connect()
            try:
                health["redis"] = await redis_client.health_check()
            finally:
                await redis_client.disconnect()
            if not health["redis"]:
                health["status"] = "degraded"
        return health

    return app


app = create_app()
