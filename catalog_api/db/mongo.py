from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from catalog_api.core.config import settings
import logging

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None


async def get_client() -> AsyncIOMotorClient:
    """
    Singleton-клиент Motor с явными таймаутами и пулом.
    """
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(
            settings.mongo_dsn,
            appname="catalog-engagement-api",
            tz_aware=True,
            uuidRepresentation="standard",
            maxPoolSize=50,
            minPoolSize=0,
            serverSelectionTimeoutMS=3000,
            connectTimeoutMS=3000,
            socketTimeoutMS=5000,
            retryWrites=True,
        )
        # быстрая проверка коннекта; недоступность не валит старт
        try:
            await _client.admin.command("ping")
        except Exception as e:
            logger.warning("mongo_ping_failed", extra={"err": str(e)})
    return _client


async def get_mongo_db() -> AsyncIOMotorDatabase:
    client = await get_client()
    return client[settings.mongo_db]


async def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
