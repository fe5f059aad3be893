"""Rating Aggregator: per-user rating rows and on-read movie aggregates.

Nothing about a movie's ratings is stored denormalized; average and count
are computed from the rows on every (uncached) read.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from catalog_api.core.errors import ConcurrencyConflict
from catalog_api.services.repositories.base import RatingsRepo

logger = logging.getLogger(__name__)

NO_RATINGS_AVERAGE = 0.0


class RatingAggregator:
    def __init__(self, repo: RatingsRepo) -> None:
        self.repo = repo

    async def add_or_update_rating(
        self,
        movie_id: int,
        username: str,
        rating: int,
    ) -> Dict[str, Any]:
        """Insert or overwrite the (movie, user) row; range checked upstream."""
        try:
            return await self.repo.upsert(movie_id, username, rating)
        except ConcurrencyConflict:
            # the racing insert created the row, now it is an update
            logger.info('rating_conflict_retry',
                        extra={'movie_id': movie_id, 'username': username})
            return await self.repo.upsert(movie_id, username, rating)

    async def average_rating(self, movie_id: int) -> float:
        """Mean rating, or exactly 0.0 when the movie has no ratings."""
        agg = await self.repo.aggregate(movie_id)
        if not agg['count']:
            return NO_RATINGS_AVERAGE
        return float(agg['average'])

    async def rating_count(self, movie_id: int) -> int:
        agg = await self.repo.aggregate(movie_id)
        return int(agg['count'])

    async def remove_rating(self, movie_id: int, username: str) -> bool:
        return await self.repo.delete(movie_id, username)

    async def user_rating(
        self,
        movie_id: int,
        username: str,
    ) -> Optional[int]:
        doc = await self.repo.find(movie_id, username)
        return int(doc['rating']) if doc and 'rating' in doc else None

    async def ratings_for_user(self, username: str) -> List[Dict[str, Any]]:
        return await self.repo.list_by_user(username)
