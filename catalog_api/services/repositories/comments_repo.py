"""Mongo repository for comments collection."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

# sort mode -> ordering of the comments list; ties go to the newest
SORT_ORDERS = {
    'newest': [('created_at', -1), ('_id', -1)],
    'likes': [('likes_count', -1), ('created_at', -1), ('_id', -1)],
    'dislikes': [('dislikes_count', -1), ('created_at', -1), ('_id', -1)],
}


def to_object_id(comment_id: str) -> Optional[ObjectId]:
    """Parse comment id; malformed ids never match anything."""
    try:
        return ObjectId(comment_id)
    except (InvalidId, TypeError):
        return None


def to_record(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    return {
        'id': str(doc['_id']),
        'movie_id': doc['movie_id'],
        'username': doc['username'],
        'text': doc['text'],
        'created_at': doc['created_at'],
        'updated_at': doc.get('updated_at'),
        'likes_count': int(doc.get('likes_count', 0)),
        'dislikes_count': int(doc.get('dislikes_count', 0)),
    }


class CommentsRepo:
    """CRUD, sorting and counter helpers for comments."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.col = db['comments']

    async def insert(
        self,
        movie_id: int,
        username: str,
        text: str,
        *,
        session=None,
    ) -> Dict[str, Any]:
        """Insert a new comment with zeroed counters."""
        doc = {
            'movie_id': movie_id,
            'username': username,
            'text': text,
            'created_at': datetime.now(timezone.utc),
            'updated_at': None,
            'likes_count': 0,
            'dislikes_count': 0,
        }
        result = await self.col.insert_one(doc, session=session)
        doc['_id'] = result.inserted_id
        return to_record(doc)

    async def get(
        self,
        comment_id: str,
        *,
        session=None,
    ) -> Optional[Dict[str, Any]]:
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        doc = await self.col.find_one({'_id': oid}, session=session)
        return to_record(doc)

    async def list_by_movie(
        self,
        movie_id: int,
        sort: str = 'newest',
    ) -> List[Dict[str, Any]]:
        """List movie comments ordered by the given sort mode."""
        if sort == 'rating':
            # net score is not a stored field, compute it on the server
            pipeline = [
                {'$match': {'movie_id': movie_id}},
                {'$addFields': {'score': {
                    '$subtract': ['$likes_count', '$dislikes_count'],
                }}},
                {'$sort': {'score': -1, 'created_at': -1, '_id': -1}},
            ]
            cursor = self.col.aggregate(pipeline)
        else:
            cursor = self.col.find({'movie_id': movie_id}).sort(
                SORT_ORDERS[sort])
        return [to_record(doc) async for doc in cursor]

    async def list_by_user(self, username: str) -> List[Dict[str, Any]]:
        cursor = self.col.find({'username': username}).sort(
            SORT_ORDERS['newest'])
        return [to_record(doc) async for doc in cursor]

    async def ids_by_user(self, username: str) -> List[str]:
        cursor = self.col.find({'username': username}, {'_id': 1})
        return [str(doc['_id']) async for doc in cursor]

    async def update_text(
        self,
        comment_id: str,
        text: str,
    ) -> Optional[Dict[str, Any]]:
        """Replace comment text and stamp updated_at."""
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        doc = await self.col.find_one_and_update(
            {'_id': oid},
            {'$set': {'text': text,
                      'updated_at': datetime.now(timezone.utc)}},
            return_document=ReturnDocument.AFTER,
        )
        return to_record(doc)

    async def inc_counters(
        self,
        comment_id: str,
        likes: int = 0,
        dislikes: int = 0,
        *,
        session=None,
    ) -> Optional[Dict[str, Any]]:
        """Add deltas to the like/dislike counters, flooring each at 0."""
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        doc = await self.col.find_one_and_update(
            {'_id': oid},
            [{'$set': {
                'likes_count': {
                    '$max': [0, {'$add': ['$likes_count', likes]}]},
                'dislikes_count': {
                    '$max': [0, {'$add': ['$dislikes_count', dislikes]}]},
            }}],
            return_document=ReturnDocument.AFTER,
            session=session,
        )
        return to_record(doc)

    async def set_counters(
        self,
        comment_id: str,
        likes: int,
        dislikes: int,
        *,
        session=None,
    ) -> Optional[Dict[str, Any]]:
        oid = to_object_id(comment_id)
        if oid is None:
            return None
        doc = await self.col.find_one_and_update(
            {'_id': oid},
            {'$set': {'likes_count': likes, 'dislikes_count': dislikes}},
            return_document=ReturnDocument.AFTER,
            session=session,
        )
        return to_record(doc)

    async def delete(self, comment_id: str, *, session=None) -> bool:
        oid = to_object_id(comment_id)
        if oid is None:
            return False
        result = await self.col.delete_one({'_id': oid}, session=session)
        return result.deleted_count == 1
