"""Process-wide AggregateCache built from settings."""

from catalog_api.core.cache import (AggregateCache, MemoryCacheBackend,
                                    RedisCacheBackend)
from catalog_api.core.config import settings
from catalog_api.db.redis import get_redis

_cache: AggregateCache | None = None


async def get_aggregate_cache() -> AggregateCache:
    global _cache
    if _cache is None:
        if settings.cache_backend == "redis":
            backend = RedisCacheBackend(await get_redis())
        elif settings.cache_backend == "memory":
            backend = MemoryCacheBackend()
        else:
            backend = None
        _cache = AggregateCache(
            backend,
            ttl_seconds=settings.cache_ttl_seconds,
            prefix=settings.app_name,
            compress=settings.cache_compress,
        )
    return _cache


def reset_cache() -> None:
    global _cache
    _cache = None
