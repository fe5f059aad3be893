"""Mongo repository for ratings collection."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from catalog_api.core.errors import ConcurrencyConflict


class RatingsRepo:
    """CRUD and aggregation helpers for ratings."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.col = db['ratings']

    async def upsert(
        self,
        movie_id: int,
        username: str,
        rating: int,
    ) -> Dict[str, Any]:
        """Upsert rating for (movie, user) and return updated document."""
        now = datetime.now(timezone.utc)
        try:
            return await self.col.find_one_and_update(
                {'movie_id': movie_id, 'username': username},
                {
                    '$set': {'rating': rating, 'updated_at': now},
                    '$setOnInsert': {'created_at': now},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
                projection={'_id': 0},
            )
        except DuplicateKeyError as error:
            # two upserts raced on the unique (movie_id, username) index
            raise ConcurrencyConflict('rating_exists') from error

    async def find(
        self,
        movie_id: int,
        username: str,
    ) -> Optional[Dict[str, Any]]:
        """Find rating for (movie, user) pair."""
        return await self.col.find_one(
            {'movie_id': movie_id, 'username': username},
            {'_id': 0},
        )

    async def delete(self, movie_id: int, username: str) -> bool:
        """Delete rating for (movie, user)."""
        result = await self.col.delete_one(
            {'movie_id': movie_id, 'username': username},
        )
        return result.deleted_count == 1

    async def list_by_user(self, username: str) -> List[Dict[str, Any]]:
        """List user ratings (newest first)."""
        cursor = (
            self.col.find({'username': username}, {'_id': 0})
            .sort('updated_at', -1)
        )
        return [doc async for doc in cursor]

    async def aggregate(self, movie_id: int) -> Dict[str, Any]:
        """Average and count of a movie's ratings; average 0.0 if none."""
        pipeline = [
            {'$match': {'movie_id': movie_id}},
            {
                '$group': {
                    '_id': '$movie_id',
                    'average': {'$avg': '$rating'},
                    'count': {'$sum': 1},
                },
            },
        ]
        docs = await self.col.aggregate(pipeline).to_list(length=1)
        if not docs:
            return {'movie_id': movie_id, 'average': 0.0, 'count': 0}

        group = docs[0]
        return {
            'movie_id': movie_id,
            'average': float(group['average']),
            'count': int(group['count']),
        }
