"""Best-effort read-through cache for derived aggregates.

The cache never holds authoritative data: every failure degrades to a
miss and recomputation, and writes/evictions that fail are logged only.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import threading
import time
import zlib
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class CacheBackend(Protocol):
    async def get(self, key: str) -> Optional[bytes]: ...

    async def set(self, key: str, payload: bytes, ttl_seconds: int
                  ) -> None: ...

    async def delete(self, key: str) -> int: ...

    async def delete_pattern(self, pattern: str) -> int: ...


class RedisCacheBackend:
    """redis.asyncio client; patterns are evicted with SCAN + DEL."""

    def __init__(self, redis) -> None:
        self.redis = redis

    async def get(self, key: str) -> Optional[bytes]:
        return await self.redis.get(key)

    async def set(self, key: str, payload: bytes, ttl_seconds: int) -> None:
        await self.redis.setex(key, ttl_seconds, payload)

    async def delete(self, key: str) -> int:
        return int(await self.redis.delete(key))

    async def delete_pattern(self, pattern: str) -> int:
        deleted = 0
        async for k in self.redis.scan_iter(match=pattern, count=500):
            deleted += int(await self.redis.delete(k))
        return deleted


class MemoryCacheBackend:
    """Process-local dict with TTL; safe to share between threads."""

    def __init__(self) -> None:
        self._data: Dict[str, Tuple[float, bytes]] = {}
        self._lock = threading.Lock()

    async def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            expires_at, payload = item
            if expires_at < time.monotonic():
                del self._data[key]
                return None
            return payload

    async def set(self, key: str, payload: bytes, ttl_seconds: int) -> None:
        with self._lock:
            self._data[key] = (time.monotonic() + ttl_seconds, payload)

    async def delete(self, key: str) -> int:
        with self._lock:
            return 1 if self._data.pop(key, None) is not None else 0

    async def delete_pattern(self, pattern: str) -> int:
        with self._lock:
            keys = [k for k in self._data if fnmatch.fnmatchcase(k, pattern)]
            for k in keys:
                del self._data[k]
            return len(keys)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


class AggregateCache:
    """Namespaced JSON cache (optionally zlib) over a pluggable backend.

    ``backend=None`` disables caching: every read is a miss.
    """

    def __init__(
        self,
        backend: Optional[CacheBackend],
        ttl_seconds: int = 300,
        prefix: str = 'catalog',
        compress: bool = True,
    ) -> None:
        self.backend = backend
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self.compress = compress
        # bumped on every eviction; a computation that overlapped one is
        # not written back
        self._generation = 0
        self._gen_lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.backend is not None

    @property
    def generation(self) -> int:
        return self._generation

    def _key(self, key: str) -> str:
        return f'{self.prefix}:{key}'

    def _encode(self, value: Any) -> bytes:
        raw = json.dumps(value, ensure_ascii=False).encode('utf-8')
        return zlib.compress(raw) if self.compress else raw

    def _decode(self, data: bytes) -> Any:
        if self.compress:
            try:
                data = zlib.decompress(data)
            except zlib.error:
                pass
        return json.loads(data.decode('utf-8'))

    async def get(self, key: str) -> Optional[Any]:
        if self.backend is None:
            return None
        try:
            data = await self.backend.get(self._key(key))
        except Exception as error:
            logger.warning('cache_get_failed',
                           extra={'key': key, 'err': str(error)})
            return None
        if data is None:
            return None
        try:
            return self._decode(data)
        except (ValueError, UnicodeDecodeError) as error:
            logger.warning('cache_decode_failed',
                           extra={'key': key, 'err': str(error)})
            return None

    async def put(self, key: str, value: Any) -> bool:
        if self.backend is None:
            return False
        try:
            await self.backend.set(
                self._key(key), self._encode(value), self.ttl_seconds)
        except Exception as error:
            logger.warning('cache_put_failed',
                           extra={'key': key, 'err': str(error)})
            return False
        return True

    async def evict(self, key_or_pattern: str) -> int:
        """Evict one key, or every key matching a ``*`` pattern."""
        with self._gen_lock:
            self._generation += 1
        if self.backend is None:
            return 0
        full = self._key(key_or_pattern)
        try:
            if '*' in key_or_pattern:
                return await self.backend.delete_pattern(full)
            return await self.backend.delete(full)
        except Exception as error:
            logger.warning('cache_evict_failed',
                           extra={'key': key_or_pattern, 'err': str(error)})
            return 0

    async def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Read-through: cached value, or compute and store it."""
        cached = await self.get(key)
        if cached is not None:
            return cached
        generation = self._generation
        value = await compute()
        if value is not None and generation == self._generation:
            await self.put(key, value)
        return value
