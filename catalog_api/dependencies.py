from fastapi import Depends, Header, HTTPException, status

from catalog_api.core.cache import AggregateCache
from catalog_api.db.cache import get_aggregate_cache
from catalog_api.db.store import get_store
from catalog_api.services.counter_reconciler import CounterReconciler
from catalog_api.services.engagement_service import EngagementService
from catalog_api.services.ratings_service import RatingsService
from catalog_api.services.repositories.base import Store
from catalog_api.services.watchlist_service import WatchlistService

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
ADMIN_ROLE = "admin"


def username_header(x_username: str = Header(..., alias="X-Username")) -> str:
    # личность уже проверена шлюзом, здесь только нормализуем
    username = x_username.strip()
    if not USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid X-Username")
    return username


def admin_role_header(
        x_user_role: str = Header("", alias="X-User-Role")) -> None:
    if x_user_role.strip().lower() != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="admin_role_required")


async def get_db_store() -> Store:
    return await get_store()


async def get_cache() -> AggregateCache:
    return await get_aggregate_cache()


async def get_counter_reconciler(
        store: Store = Depends(get_db_store)) -> CounterReconciler:
    return CounterReconciler(store)


async def get_engagement_service(
        store: Store = Depends(get_db_store),
        reconciler: CounterReconciler = Depends(get_counter_reconciler),
) -> EngagementService:
    return EngagementService(store, reconciler)


async def get_ratings_service(
        store: Store = Depends(get_db_store),
        cache: AggregateCache = Depends(get_cache),
) -> RatingsService:
    return RatingsService(store, cache)


async def get_watchlist_service(
        store: Store = Depends(get_db_store)) -> WatchlistService:
    return WatchlistService(store)
