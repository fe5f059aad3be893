from __future__ import annotations
from datetime import datetime, timezone
from typing import List, Dict, Any
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError


class WatchlistRepo:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["watchlist"]

    async def upsert(self, username: str, movie_id: int) -> bool:
        """
        Возвращает created: True,
        если вставили новую запись (upserted_id != None).
        """
        now = datetime.now(timezone.utc)
        try:
            res = await self.col.update_one(
                {"username": username, "movie_id": movie_id},
                {"$setOnInsert": {"created_at": now}},
                upsert=True,
            )
        except DuplicateKeyError:
            # параллельный upsert уже вставил запись
            return False
        return res.upserted_id is not None

    async def delete(self, username: str, movie_id: int) -> bool:
        res = await self.col.delete_one(
            {"username": username, "movie_id": movie_id})
        return res.deleted_count == 1

    async def exists(self, username: str, movie_id: int) -> bool:
        return await self.col.count_documents(
            {"username": username, "movie_id": movie_id}, limit=1) == 1

    async def list_by_user(
            self,
            username: str,
            limit: int,
            offset: int) -> List[Dict[str, Any]]:
        cur = (self.col.find({"username": username},
                             {"_id": 0, "movie_id": 1, "created_at": 1})
               .sort("created_at", -1).skip(offset).limit(limit))
        return [d async for d in cur]

    async def count_by_user(self, username: str) -> int:
        return await self.col.count_documents({"username": username})
