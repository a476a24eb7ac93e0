"""
Record sinks and object stores.

The record sink is append-only: one write per saved record, no update or
delete. The object store is a key-value put used for full article bodies.
"""
import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from newswatch.core.config import Settings
from newswatch.core.redis import RedisClient
from newswatch.crawler.errors import StorageError
from newswatch.crawler.records import Record

logger = logging.getLogger(__name__)


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


class RecordSink(ABC):
    """Append-only destination for saved records."""

    @abstractmethod
    async def write(self, record: Record) -> None:
        pass

    async def close(self) -> None:
        """Release resources held by the sink."""


class ObjectStore(ABC):
    """Key-value store for JSON documents."""

    @abstractmethod
    async def put(self, key: str, value: Dict[str, Any]) -> None:
        pass

    async def close(self) -> None:
        """Release resources held by the store."""


class InMemoryRecordSink(RecordSink):
    """Keeps records in a list, in write order."""

    def __init__(self):
        self.records: List[Record] = []

    async def write(self, record: Record) -> None:
        self.records.append(record)


class JsonlRecordSink(RecordSink):
    """Appends one JSON line per record to a file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def write(self, record: Record) -> None:
        line = _dumps(record.to_dict()) + "\n"
        async with self._lock:
            try:
                await asyncio.to_thread(self._append, line)
            except OSError as e:
                raise StorageError(f"Failed to append record to {self.path}: {e}") from e

    def _append(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)


class InMemoryObjectStore(ObjectStore):
    """Dictionary-backed object store."""

    def __init__(self):
        self.objects: Dict[str, Dict[str, Any]] = {}

    async def put(self, key: str, value: Dict[str, Any]) -> None:
        self.objects[key] = value


class FileSystemObjectStore(ObjectStore):
    """Stores each value as ``<root>/<key>.json``."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    async def put(self, key: str, value: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self._write, self.path_for(key), _dumps(value))
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    @staticmethod
    def _write(path: Path, data: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data, encoding="utf-8")


class RedisObjectStore(ObjectStore):
    """Stores JSON values in Redis through a ``RedisClient``."""

    def __init__(self, client: Optional[RedisClient] = None, expire: Optional[int] = None):
        self.client = client or RedisClient()
        self.expire = expire

    async def put(self, key: str, value: Dict[str, Any]) -> None:
        try:
            if not self.client.is_connected:
                await self.client.connect()
            await self.client.put_json(key, value, expire=self.expire)
        except Exception as e:
            raise StorageError(f"Failed to write {key} to Redis: {e}") from e

    async def close(self) -> None:
        await self.client.disconnect()


def build_record_sink(settings: Settings) -> RecordSink:
    """Create the record sink configured in settings."""
    return JsonlRecordSink(Path(settings.STORAGE_DIR) / settings.RECORDS_FILENAME)


def build_object_store(settings: Settings) -> ObjectStore:
    """Create the object store back-end configured in settings."""
    backend = settings.OBJECT_STORE_BACKEND.lower()
    if backend == "redis":
        return RedisObjectStore(RedisClient(settings))
    if backend == "filesystem":
        return FileSystemObjectStore(settings.STORAGE_DIR)
    raise ValueError(f"Unknown object store backend: {settings.OBJECT_STORE_BACKEND}")
