"""
Redis connection used by the Redis object store back-end.
"""
import json
from typing import Any, Dict, Optional

from redis.asyncio import ConnectionPool, Redis

from newswatch.core.config import Settings, get_settings


class RedisClient:
    """Pooled redis.asyncio connection with namespaced JSON writes."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.key_prefix = self.settings.REDIS_KEY_PREFIX
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[Redis] = None

    @property
    def client(self) -> Redis:
        """Get the Redis client."""
        if self._client is None:
            raise RuntimeError("Redis not initialized. Call connect() first.")
        return self._client

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """
        Create the connection pool.

        No round trip is made until the first command; calling this twice
        keeps the existing pool.
        """
        if self._client is not None:
            return
        self._pool = ConnectionPool.from_url(
            self.settings.redis_url,
            max_connections=self.settings.REDIS_POOL_SIZE,
            decode_responses=True,
        )
        self._client = Redis(connection_pool=self._pool)

    async def disconnect(self) -> None:
        """Close the client and its pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    def namespaced(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def put_json(
        self,
        key: str,
        value: Dict[str, Any],
        expire: Optional[int] = None,
    ) -> bool:
        """
        Store ``value`` as a JSON string under the namespaced key.

        Args:
            key: Object key, e.g. ``articles/<encoded url>``
            value: JSON-serializable document
            expire: Expiration time in seconds, None to keep forever

        Returns:
            bool: True if Redis acknowledged the write
        """
        payload = json.dumps(value, ensure_ascii=False)
        return bool(await self.client.set(self.namespaced(key), payload, ex=expire))

    async def health_check(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            bool: True if Redis is reachable, False otherwise.
        """
        try:
            return await self.client.ping()
        except Exception:
            return False
