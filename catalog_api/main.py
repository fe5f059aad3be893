import logging

from fastapi import FastAPI

from contextlib import asynccontextmanager

from catalog_api.core.logger import setup_json_logging, shutdown_logging
from catalog_api.core.sentry import init_sentry
from catalog_api.core.config import settings
from catalog_api.core.middleware import RequestContextMiddleware
from catalog_api.db.cache import get_aggregate_cache, reset_cache
from catalog_api.db.mongo import close_client
from catalog_api.db.redis import close_redis
from catalog_api.db.store import get_store, reset_store

from catalog_api.api.v1.comments import router as comments_router
from catalog_api.api.v1.ratings import router as ratings_router
from catalog_api.api.v1.watchlist import router as watchlist_router
from catalog_api.api.v1.admin import router as admin_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1) логи до всего
    setup_json_logging(service=settings.app_name)
    init_sentry(settings.sentry_dsn, environment=settings.env)

    # 2) хранилище и кэш (коннекты прогреваются здесь, а не на 1-м запросе)
    await get_store()
    cache = await get_aggregate_cache()
    logger.info("app_started",
                extra={"storage_backend": settings.storage_backend,
                       "cache_enabled": cache.enabled})

    try:
        yield
    finally:
        reset_store()
        reset_cache()
        await close_client()
        await close_redis()
        shutdown_logging()


app = FastAPI(title="Catalog Engagement Service", lifespan=lifespan)

# trace_id + access JSON
app.add_middleware(RequestContextMiddleware)

# приглушим штатный uvicorn-access, чтобы не было дублей
logging.getLogger("uvicorn.access").setLevel("WARNING")


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(comments_router)
app.include_router(ratings_router)
app.include_router(watchlist_router)
app.include_router(admin_router)
