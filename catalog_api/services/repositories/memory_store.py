"""In-process store with the same contract as the Mongo repositories.

Used for local runs and the test-suite (``STORAGE_BACKEND=memory``).
Transactions serialize on one ``asyncio.Lock``; there is no rollback.
"""

from __future__ import annotations

import asyncio
import itertools
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId

from catalog_api.core.errors import ConcurrencyConflict


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _sort_key(sort: str):
    def score(rec: Dict[str, Any]) -> int:
        if sort == 'likes':
            return rec['likes_count']
        if sort == 'dislikes':
            return rec['dislikes_count']
        if sort == 'rating':
            return rec['likes_count'] - rec['dislikes_count']
        return 0

    return lambda rec: (score(rec), rec['created_at'], rec['_seq'])


def _public(rec: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in rec.items() if k != '_seq'}


class MemoryCommentsRepo:
    def __init__(self) -> None:
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._seq = itertools.count()

    async def insert(self, movie_id: int, username: str, text: str,
                     *, session=None) -> Dict[str, Any]:
        rec = {
            'id': str(ObjectId()),
            'movie_id': movie_id,
            'username': username,
            'text': text,
            'created_at': _now(),
            'updated_at': None,
            'likes_count': 0,
            'dislikes_count': 0,
            '_seq': next(self._seq),
        }
        self._rows[rec['id']] = rec
        return _public(rec)

    async def get(self, comment_id: str, *, session=None
                  ) -> Optional[Dict[str, Any]]:
        rec = self._rows.get(comment_id)
        return None if rec is None else _public(rec)

    async def list_by_movie(self, movie_id: int, sort: str = 'newest'
                            ) -> List[Dict[str, Any]]:
        rows = [r for r in self._rows.values() if r['movie_id'] == movie_id]
        rows.sort(key=_sort_key(sort), reverse=True)
        return [_public(r) for r in rows]

    async def list_by_user(self, username: str) -> List[Dict[str, Any]]:
        rows = [r for r in self._rows.values() if r['username'] == username]
        rows.sort(key=_sort_key('newest'), reverse=True)
        return [_public(r) for r in rows]

    async def ids_by_user(self, username: str) -> List[str]:
        return [r['id'] for r in self._rows.values()
                if r['username'] == username]

    async def update_text(self, comment_id: str, text: str
                          ) -> Optional[Dict[str, Any]]:
        rec = self._rows.get(comment_id)
        if rec is None:
            return None
        rec['text'] = text
        rec['updated_at'] = _now()
        return _public(rec)

    async def inc_counters(self, comment_id: str, likes: int = 0,
                           dislikes: int = 0, *, session=None
                           ) -> Optional[Dict[str, Any]]:
        rec = self._rows.get(comment_id)
        if rec is None:
            return None
        rec['likes_count'] = max(0, rec['likes_count'] + likes)
        rec['dislikes_count'] = max(0, rec['dislikes_count'] + dislikes)
        return _public(rec)

    async def set_counters(self, comment_id: str, likes: int,
                           dislikes: int, *, session=None
                           ) -> Optional[Dict[str, Any]]:
        rec = self._rows.get(comment_id)
        if rec is None:
            return None
        rec['likes_count'] = likes
        rec['dislikes_count'] = dislikes
        return _public(rec)

    async def delete(self, comment_id: str, *, session=None) -> bool:
        return self._rows.pop(comment_id, None) is not None


class MemoryVotesRepo:
    def __init__(self) -> None:
        self._rows: Dict[Tuple[str, str], Dict[str, Any]] = {}

    async def get(self, comment_id: str, username: str, *, session=None
                  ) -> Optional[bool]:
        rec = self._rows.get((comment_id, username))
        return None if rec is None else rec['is_like']

    async def insert(self, comment_id: str, username: str, is_like: bool,
                     *, session=None) -> None:
        key = (comment_id, username)
        if key in self._rows:
            raise ConcurrencyConflict('vote_exists')
        self._rows[key] = {
            'comment_id': comment_id,
            'username': username,
            'is_like': is_like,
            'created_at': _now(),
        }

    async def set_sign(self, comment_id: str, username: str, is_like: bool,
                       *, session=None) -> bool:
        rec = self._rows.get((comment_id, username))
        if rec is None:
            return False
        rec['is_like'] = is_like
        return True

    async def delete(self, comment_id: str, username: str, *, session=None
                     ) -> Optional[bool]:
        rec = self._rows.pop((comment_id, username), None)
        return None if rec is None else rec['is_like']

    async def count(self, comment_id: str, is_like: bool, *, session=None
                    ) -> int:
        return sum(1 for (cid, _), rec in self._rows.items()
                   if cid == comment_id and rec['is_like'] == is_like)

    async def delete_many_by_comment(self, comment_id: str, *, session=None
                                     ) -> int:
        keys = [key for key in self._rows if key[0] == comment_id]
        for key in keys:
            del self._rows[key]
        return len(keys)


class MemoryRatingsRepo:
    def __init__(self) -> None:
        self._rows: Dict[Tuple[int, str], Dict[str, Any]] = {}

    async def find(self, movie_id: int, username: str
                   ) -> Optional[Dict[str, Any]]:
        rec = self._rows.get((movie_id, username))
        return None if rec is None else dict(rec)

    async def upsert(self, movie_id: int, username: str, rating: int
                     ) -> Dict[str, Any]:
        now = _now()
        rec = self._rows.setdefault((movie_id, username), {
            'movie_id': movie_id,
            'username': username,
            'created_at': now,
        })
        rec['rating'] = rating
        rec['updated_at'] = now
        return dict(rec)

    async def delete(self, movie_id: int, username: str) -> bool:
        return self._rows.pop((movie_id, username), None) is not None

    async def aggregate(self, movie_id: int) -> Dict[str, Any]:
        values = [rec['rating'] for (mid, _), rec in self._rows.items()
                  if mid == movie_id]
        average = sum(values) / len(values) if values else 0.0
        return {'movie_id': movie_id, 'average': float(average),
                'count': len(values)}

    async def list_by_user(self, username: str) -> List[Dict[str, Any]]:
        rows = [dict(rec) for rec in self._rows.values()
                if rec['username'] == username]
        rows.sort(key=lambda rec: rec['updated_at'], reverse=True)
        return rows


class MemoryWatchlistRepo:
    def __init__(self) -> None:
        self._rows: Dict[Tuple[str, int], Dict[str, Any]] = {}
        self._seq = itertools.count()

    async def upsert(self, username: str, movie_id: int) -> bool:
        key = (username, movie_id)
        if key in self._rows:
            return False
        self._rows[key] = {'movie_id': movie_id, 'created_at': _now(),
                           '_seq': next(self._seq)}
        return True

    async def delete(self, username: str, movie_id: int) -> bool:
        return self._rows.pop((username, movie_id), None) is not None

    async def exists(self, username: str, movie_id: int) -> bool:
        return (username, movie_id) in self._rows

    async def list_by_user(self, username: str, limit: int, offset: int
                           ) -> List[Dict[str, Any]]:
        rows = [rec for (user, _), rec in self._rows.items()
                if user == username]
        rows.sort(key=lambda rec: (rec['created_at'], rec['_seq']),
                  reverse=True)
        return [_public(rec) for rec in rows[offset:offset + limit]]

    async def count_by_user(self, username: str) -> int:
        return sum(1 for user, _ in self._rows if user == username)


class MemoryStore:
    def __init__(self) -> None:
        self.comments = MemoryCommentsRepo()
        self.votes = MemoryVotesRepo()
        self.ratings = MemoryRatingsRepo()
        self.watchlist = MemoryWatchlistRepo()
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self):
        async with self._lock:
            yield None
