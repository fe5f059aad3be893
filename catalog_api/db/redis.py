import logging

from redis.asyncio import Redis

from catalog_api.core.config import settings

logger = logging.getLogger(__name__)

_client: Redis | None = None


async def get_redis() -> Redis:
    """Singleton-клиент redis.asyncio для кэша агрегатов."""
    global _client
    if _client is None:
        _client = Redis.from_url(
            settings.redis_url,
            decode_responses=False,
            socket_connect_timeout=1,
            socket_timeout=1,
        )
        # кэш best-effort: недоступный redis не мешает старту
        try:
            await _client.ping()
        except Exception as e:
            logger.warning("redis_ping_failed", extra={"err": str(e)})
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
