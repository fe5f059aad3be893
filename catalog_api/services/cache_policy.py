"""Cache keys and the invalidation table for every mutation kind.

Each write path calls :func:`invalidate` with its :class:`Mutation`;
the patterns evicted for it are listed in ``INVALIDATION_RULES`` only.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Tuple

from catalog_api.core.cache import AggregateCache

logger = logging.getLogger(__name__)


class CacheKey:
    @staticmethod
    def rating_average(movie_id: int) -> str:
        return f'ratings:{movie_id}:avg'

    @staticmethod
    def rating_count(movie_id: int) -> str:
        return f'ratings:{movie_id}:count'

    @staticmethod
    def movies_all() -> str:
        return 'movies:all'

    @staticmethod
    def movie(movie_id: int) -> str:
        return f'movies:id:{movie_id}'

    @staticmethod
    def movies_by(field: str, value: str) -> str:
        """Catalog listing keyed by query shape, e.g. genre=Drama."""
        return f'movies:{field}:{value}'


class Mutation(str, Enum):
    RATING_CHANGED = 'rating_changed'
    MOVIE_CREATED = 'movie_created'
    MOVIE_UPDATED = 'movie_updated'
    MOVIE_DELETED = 'movie_deleted'
    DIRECTOR_ATTACHED = 'director_attached'
    DIRECTOR_DETACHED = 'director_detached'


# any movie write can change any movie listing, so the whole namespace goes
INVALIDATION_RULES: Dict[Mutation, Tuple[str, ...]] = {
    Mutation.RATING_CHANGED: ('ratings:{movie_id}:*',),
    Mutation.MOVIE_CREATED: ('movies:*',),
    Mutation.MOVIE_UPDATED: ('movies:*',),
    Mutation.MOVIE_DELETED: ('movies:*', 'ratings:{movie_id}:*'),
    Mutation.DIRECTOR_ATTACHED: ('movies:*',),
    Mutation.DIRECTOR_DETACHED: ('movies:*',),
}


def patterns_for(mutation: Mutation, **params) -> Tuple[str, ...]:
    try:
        return tuple(p.format(**params) for p in INVALIDATION_RULES[mutation])
    except KeyError as error:
        raise ValueError(
            f'{mutation.value} invalidation needs {error.args[0]!r}'
        ) from error


async def invalidate(cache: AggregateCache, mutation: Mutation,
                     **params) -> int:
    """Evict every cache entry the mutation may have made stale."""
    evicted = 0
    for pattern in patterns_for(mutation, **params):
        evicted += await cache.evict(pattern)
    logger.info('cache_invalidated',
                extra={'mutation': mutation.value, 'evicted': evicted})
    return evicted
