import os
import pytest
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

from catalog_api.core.cache import AggregateCache, MemoryCacheBackend
from catalog_api.core.config import settings
from catalog_api.db.cache import reset_cache
from catalog_api.db.store import reset_store
from catalog_api.main import app
from catalog_api.services.repositories.memory_store import MemoryStore


@pytest.fixture(scope="session", autouse=True)
def test_env():
    # in-process хранилище и кэш: тестам не нужны mongo и redis
    os.environ["STORAGE_BACKEND"] = "memory"
    os.environ["CACHE_BACKEND"] = "memory"
    os.environ["SENTRY_DSN"] = ""
    settings.storage_backend = "memory"
    settings.cache_backend = "memory"
    settings.sentry_dsn = ""


@pytest.fixture(autouse=True)
def clean_state():
    """Свежие singleton-хранилище и кэш на каждый тест."""
    reset_store()
    reset_cache()
    yield
    reset_store()
    reset_cache()


@pytest.fixture
async def client():
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport,
                               base_url="http://test") as ac:
            yield ac


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache() -> AggregateCache:
    return AggregateCache(MemoryCacheBackend(), ttl_seconds=60,
                          prefix="test")
