"""Query cache with lazy TTL expiry and substring pattern eviction.

Entries are keyed by ``"<operation>-<fingerprint>"`` where the fingerprint is
the canonical JSON of the filter set, so ``evict_pattern("path-nodes-<id>")``
or ``evict_pattern("progress-<user>")`` removes every dependent view.

Expiry is checked when an entry is read: an entry whose age is greater than
the TTL is treated as absent and dropped. An age equal to the TTL is still a
hit. ``sweep`` drops stale entries eagerly and is what the optional background
task calls.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import structlog
from pydantic import BaseModel
from pydantic_core import to_jsonable_python
from redis import asyncio as aioredis

from microguide.config import Settings, get_settings

logger = structlog.get_logger(__name__)


def make_key(operation: str, params: Any = None) -> str:
    """Build a cache key from an operation name and a filter set."""
    if params is None:
        return operation
    if isinstance(params, BaseModel):
        params = params.model_dump(mode="json")
    fingerprint = json.dumps(params, sort_keys=True, default=str)
    return f"{operation}-{fingerprint}"


@dataclass
class CacheEntry:
    payload: Any
    written_at: float


class QueryCache:
    """In-memory cache used from a single event loop; no locking."""

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.written_at > self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.payload

    async def set(self, key: str, payload: Any) -> None:
        self._entries[key] = CacheEntry(payload=payload, written_at=self._clock())

    async def evict_pattern(self, pattern: str) -> int:
        """Drop every key containing ``pattern``."""
        doomed = [key for key in self._entries if pattern in key]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    async def clear(self) -> None:
        self._entries.clear()

    async def sweep(self) -> int:
        now = self._clock()
        stale = [
            key
            for key, entry in self._entries.items()
            if now - entry.written_at > self.ttl_seconds
        ]
        for key in stale:
            del self._entries[key]
        return len(stale)


class RedisQueryCache:
    """Redis-backed cache for deployments running several workers.

    Payloads are stored as JSON with a server-side TTL, so readers get plain
    decoded JSON back rather than the object that was written.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        ttl_seconds: float = 300.0,
        prefix: str = "mg:cache:",
    ):
        self._redis = redis
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._redis.get(self.prefix + key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return json.loads(raw)

    async def set(self, key: str, payload: Any) -> None:
        await self._redis.set(
            self.prefix + key,
            json.dumps(to_jsonable_python(payload)),
            ex=max(1, int(self.ttl_seconds)),
        )

    async def evict_pattern(self, pattern: str) -> int:
        return await self._delete_matching(f"{self.prefix}*{pattern}*")

    async def clear(self) -> None:
        await self._delete_matching(f"{self.prefix}*")

    async def sweep(self) -> int:
        # Redis expires keys on its own.
        return 0

    async def _delete_matching(self, match: str) -> int:
        keys = [key async for key in self._redis.scan_iter(match=match)]
        if keys:
            await self._redis.delete(*keys)
        return len(keys)


def build_query_cache(settings: Optional[Settings] = None) -> QueryCache | RedisQueryCache:
    """Construct the cache backend selected in settings."""
    settings = settings or get_settings()
    if settings.cache_backend == "redis":
        return RedisQueryCache(
            aioredis.from_url(settings.redis_url),
            ttl_seconds=settings.cache_ttl_seconds,
        )
    return QueryCache(ttl_seconds=settings.cache_ttl_seconds)


async def run_cache_sweeper(cache: QueryCache | RedisQueryCache, interval: float) -> None:
    """Periodically drop stale entries until cancelled."""
    while True:
        await asyncio.sleep(interval)
        dropped = await cache.sweep()
        if dropped:
            logger.debug("cache_sweep", dropped=dropped)
