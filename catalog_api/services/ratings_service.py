"""Service layer for movie ratings with cached aggregates."""

from typing import Optional

from catalog_api.core.cache import AggregateCache
from catalog_api.core.errors import InvalidArgument
from catalog_api.models.ratings import (
    MovieRatingSummary,
    RatingPutResponse,
    UserRatingItem,
    UserRatingsResponse,
)
from catalog_api.services.cache_policy import CacheKey, Mutation, invalidate
from catalog_api.services.rating_aggregator import RatingAggregator
from catalog_api.services.repositories.base import Store

RATING_MIN = 1
RATING_MAX = 10


class RatingsService:
    """Rating writes invalidate the movie's cached average and count."""

    def __init__(self, store: Store, cache: AggregateCache) -> None:
        self.aggregator = RatingAggregator(store.ratings)
        self.cache = cache

    # ---------- CREATE / UPDATE ----------

    async def put_rating(
        self,
        movie_id: int,
        username: str,
        rating: int,
    ) -> RatingPutResponse:
        """Add or overwrite the user's rating for a movie."""
        if not RATING_MIN <= rating <= RATING_MAX:
            raise InvalidArgument('rating_out_of_range')

        doc = await self.aggregator.add_or_update_rating(
            movie_id, username, rating)
        await invalidate(self.cache, Mutation.RATING_CHANGED,
                         movie_id=movie_id)
        return RatingPutResponse(movie_id=movie_id, rating=int(doc['rating']))

    # ---------- READ ----------

    async def get_user_rating(
        self,
        movie_id: int,
        username: str,
    ) -> Optional[int]:
        return await self.aggregator.user_rating(movie_id, username)

    async def average_rating(self, movie_id: int) -> float:
        value = await self.cache.get_or_compute(
            CacheKey.rating_average(movie_id),
            lambda: self.aggregator.average_rating(movie_id),
        )
        return float(value)

    async def rating_count(self, movie_id: int) -> int:
        value = await self.cache.get_or_compute(
            CacheKey.rating_count(movie_id),
            lambda: self.aggregator.rating_count(movie_id),
        )
        return int(value)

    async def movie_summary(self, movie_id: int) -> MovieRatingSummary:
        return MovieRatingSummary(
            movie_id=movie_id,
            average_rating=await self.average_rating(movie_id),
            rating_count=await self.rating_count(movie_id),
        )

    async def ratings_for_user(self, username: str) -> UserRatingsResponse:
        """The user's ratings; movie details are joined by the caller."""
        docs = await self.aggregator.ratings_for_user(username)
        return UserRatingsResponse(
            username=username,
            items=[
                UserRatingItem(
                    movie_id=doc['movie_id'],
                    rating=int(doc['rating']),
                    updated_at=doc.get('updated_at'),
                )
                for doc in docs
            ],
        )

    # ---------- DELETE ----------

    async def delete_rating(self, movie_id: int, username: str) -> bool:
        deleted = await self.aggregator.remove_rating(movie_id, username)
        if deleted:
            await invalidate(self.cache, Mutation.RATING_CHANGED,
                             movie_id=movie_id)
        return deleted
