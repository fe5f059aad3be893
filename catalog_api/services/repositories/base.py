"""Storage contracts consumed by the services.

Records cross this boundary as plain dicts:

* comment: ``id, movie_id, username, text, created_at, updated_at,
  likes_count, dislikes_count``
* vote: ``comment_id, username, is_like, created_at``
* rating: ``movie_id, username, rating, created_at, updated_at``
* watchlist item: ``username, movie_id, created_at``

Writes that would break a unique pair raise
:class:`~catalog_api.core.errors.ConcurrencyConflict`.
"""

from __future__ import annotations

from typing import (Any, AsyncContextManager, Dict, List, Optional,
                    Protocol)

Record = Dict[str, Any]


class CommentsRepo(Protocol):
    async def insert(self, movie_id: int, username: str, text: str,
                     *, session=None) -> Record: ...

    async def get(self, comment_id: str, *, session=None
                  ) -> Optional[Record]: ...

    async def list_by_movie(self, movie_id: int, sort: str
                            ) -> List[Record]: ...

    async def list_by_user(self, username: str) -> List[Record]: ...

    async def ids_by_user(self, username: str) -> List[str]: ...

    async def update_text(self, comment_id: str, text: str
                          ) -> Optional[Record]: ...

    async def inc_counters(self, comment_id: str, likes: int = 0,
                           dislikes: int = 0, *, session=None
                           ) -> Optional[Record]: ...

    async def set_counters(self, comment_id: str, likes: int,
                           dislikes: int, *, session=None
                           ) -> Optional[Record]: ...

    async def delete(self, comment_id: str, *, session=None) -> bool: ...


class VotesRepo(Protocol):
    async def get(self, comment_id: str, username: str, *, session=None
                  ) -> Optional[bool]: ...

    async def insert(self, comment_id: str, username: str, is_like: bool,
                     *, session=None) -> None: ...

    async def set_sign(self, comment_id: str, username: str, is_like: bool,
                       *, session=None) -> bool: ...

    async def delete(self, comment_id: str, username: str, *, session=None
                     ) -> Optional[bool]: ...

    async def count(self, comment_id: str, is_like: bool, *, session=None
                    ) -> int: ...

    async def delete_many_by_comment(self, comment_id: str, *, session=None
                                     ) -> int: ...


class RatingsRepo(Protocol):
    async def find(self, movie_id: int, username: str
                   ) -> Optional[Record]: ...

    async def upsert(self, movie_id: int, username: str, rating: int
                     ) -> Record: ...

    async def delete(self, movie_id: int, username: str) -> bool: ...

    async def aggregate(self, movie_id: int) -> Record: ...

    async def list_by_user(self, username: str) -> List[Record]: ...


class WatchlistRepo(Protocol):
    async def upsert(self, username: str, movie_id: int) -> bool: ...

    async def delete(self, username: str, movie_id: int) -> bool: ...

    async def exists(self, username: str, movie_id: int) -> bool: ...

    async def list_by_user(self, username: str, limit: int, offset: int
                           ) -> List[Record]: ...

    async def count_by_user(self, username: str) -> int: ...


class Store(Protocol):
    """Bundle of repositories sharing one transaction scope."""

    comments: CommentsRepo
    votes: VotesRepo
    ratings: RatingsRepo
    watchlist: WatchlistRepo

    def transaction(self) -> AsyncContextManager[Any]: ...
