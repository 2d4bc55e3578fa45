"""
Record store backends.

Redis is the production document store: each record is a JSON document and
a sorted set indexes record ids by creation time. The in-memory backend is
for development and tests.
"""

import itertools
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple

import redis
import structlog

from ocr_records.config import get_settings
from ocr_records.errors import PersistenceError
from ocr_records.storage.records import Record

logger = structlog.get_logger(__name__)


class RecordStore(ABC):
    """A single flat collection of records."""

    backend: str = "abstract"

    @abstractmethod
    def insert(self, record: Record) -> Record:
        """Persist a new record."""

    @abstractmethod
    def list(self, search: Optional[str] = None) -> List[Record]:
        """
        Return records newest first.

        Args:
            search: Optional substring; only records whose extracted text
                contains it (case-insensitively) are returned. Empty string
                means no filter.
        """

    @abstractmethod
    def get(self, record_id: str) -> Optional[Record]:
        """Return the record or None."""

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Remove a record. True only if this call removed it."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""

    def ping(self) -> bool:
        return True

    def close(self):
        pass


def _filter(records: List[Record], search: Optional[str]) -> List[Record]:
    if not search:
        return records
    return [r for r in records if r.matches(search)]


class RedisRecordStore(RecordStore):
    """
    Redis-backed record store.

    Keys:
        <prefix>:record:<id>  JSON document
        <prefix>:records      sorted set of ids scored by created_at
    """

    backend = "redis"

    def __init__(self, config=None, client: redis.Redis = None):
        """
        Initialize store.

        Args:
            config: StoreSettings instance
            client: Pre-built Redis client (overrides config.redis_url)
        """
        self.settings = config or get_settings().store
        self.prefix = self.settings.key_prefix
        self._client = client or redis.from_url(
            self.settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=self.settings.socket_timeout,
            socket_timeout=self.settings.socket_timeout
        )

    @property
    def index_key(self) -> str:
        return f"{self.prefix}:records"

    def _record_key(self, record_id: str) -> str:
        return f"{self.prefix}:record:{record_id}"

    @contextmanager
    def _guard(self, operation: str):
        try:
            yield
        except redis.RedisError as e:
            logger.error("record_store_error", backend=self.backend, operation=operation, error=str(e))
            raise PersistenceError(
                f"Record store {operation} failed: {e}",
                {"backend": self.backend, "operation": operation}
            )

    def insert(self, record: Record) -> Record:
        with self._guard("insert"):
            pipe = self._client.pipeline(transaction=True)
            pipe.set(self._record_key(record.id), record.to_json())
            pipe.zadd(self.index_key, {record.id: record.created_at.timestamp()})
            pipe.execute()
        logger.debug("record_inserted", id=record.id)
        return record

    def list(self, search: Optional[str] = None) -> List[Record]:
        with self._guard("list"):
            ids = self._client.zrevrange(self.index_key, 0, -1)
            if not ids:
                return []
            documents = self._client.mget([self._record_key(i) for i in ids])

        # Documents can vanish between the two reads under concurrent deletes
        records = [Record.from_json(doc) for doc in documents if doc is not None]
        return _filter(records, search)

    def get(self, record_id: str) -> Optional[Record]:
        with self._guard("get"):
            document = self._client.get(self._record_key(record_id))
        if document is None:
            return None
        return Record.from_json(document)

    def delete(self, record_id: str) -> bool:
        with self._guard("delete"):
            pipe = self._client.pipeline(transaction=True)
            pipe.delete(self._record_key(record_id))
            pipe.zrem(self.index_key, record_id)
            deleted, _ = pipe.execute()
        return deleted == 1

    def count(self) -> int:
        with self._guard("count"):
            return self._client.zcard(self.index_key)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as e:
            logger.warning("record_store_unavailable", backend=self.backend, error=str(e))
            return False

    def close(self):
        self._client.close()


class MemoryRecordStore(RecordStore):
    """Process-local record store guarded by a lock."""

    backend = "memory"

    def __init__(self):
        self._records: Dict[str, Tuple[int, Record]] = {}
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def insert(self, record: Record) -> Record:
        with self._lock:
            self._records[record.id] = (next(self._sequence), record)
        return record

    def list(self, search: Optional[str] = None) -> List[Record]:
        with self._lock:
            entries = list(self._records.values())
        # Insertion order breaks created_at ties
        entries.sort(key=lambda entry: (entry[1].created_at, entry[0]), reverse=True)
        return _filter([record for _, record in entries], search)

    def get(self, record_id: str) -> Optional[Record]:
        with self._lock:
            entry = self._records.get(record_id)
        return entry[1] if entry else None

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def count(self) -> int:
        with self._lock:
            return len(self._records)


def create_record_store(settings=None) -> RecordStore:
    """Build the store selected by STORE_BACKEND."""
    settings = settings or get_settings()
    if settings.store.backend == "memory":
        logger.info("record_store_initialized", backend="memory")
        return MemoryRecordStore()

    store = RedisRecordStore(settings.store)
    logger.info("record_store_initialized", backend="redis", url=settings.store.redis_url)
    return store
