"""Выбор бэкенда хранилища по настройкам (один на процесс)."""

from catalog_api.core.config import settings
from catalog_api.db.mongo import get_mongo_db
from catalog_api.services.repositories.base import Store
from catalog_api.services.repositories.memory_store import MemoryStore
from catalog_api.services.repositories.mongo_store import MongoStore

_store: Store | None = None


async def get_store() -> Store:
    global _store
    if _store is None:
        if settings.storage_backend == "memory":
            _store = MemoryStore()
        else:
            _store = MongoStore(await get_mongo_db())
    return _store


def reset_store() -> None:
    """Сбросить singleton (между тестами, при остановке приложения)."""
    global _store
    _store = None
