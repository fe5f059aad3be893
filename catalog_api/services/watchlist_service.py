"""Service layer for managing user watchlists."""

from catalog_api.models.watchlist import (
    WatchlistDeleteResponse,
    WatchlistItem,
    WatchlistPutResponse,
    WatchlistResponse,
    WatchlistStatus,
)
from catalog_api.services.repositories.base import Store


class WatchlistService:
    """Movie existence is checked by the catalog before calling in."""

    def __init__(self, store: Store) -> None:
        self.repo = store.watchlist

    async def add(self, username: str, movie_id: int) -> WatchlistPutResponse:
        """Add a movie; adding it twice is not an error."""
        created = await self.repo.upsert(username=username, movie_id=movie_id)
        return WatchlistPutResponse(ok=True, created=created)

    async def remove(
        self,
        username: str,
        movie_id: int,
    ) -> WatchlistDeleteResponse:
        deleted = await self.repo.delete(username=username, movie_id=movie_id)
        return WatchlistDeleteResponse(ok=True, deleted=deleted)

    async def contains(self, username: str, movie_id: int) -> WatchlistStatus:
        return WatchlistStatus(
            movie_id=movie_id,
            in_watchlist=await self.repo.exists(username, movie_id),
        )

    async def list(
        self,
        username: str,
        limit: int,
        offset: int,
    ) -> WatchlistResponse:
        """List the user's watchlist, newest first."""
        docs = await self.repo.list_by_user(
            username=username,
            limit=limit,
            offset=offset,
        )
        total = await self.repo.count_by_user(username=username)
        items = [WatchlistItem(movie_id=doc['movie_id'],
                               created_at=doc['created_at']) for doc in docs]
        return WatchlistResponse(items=items, total=total)
