from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from catalog_api.core.errors import ConcurrencyConflict


class VotesRepo:
    """Один документ на пару (comment_id, username): уникальный индекс."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.col = db["comment_votes"]

    async def get(
            self,
            comment_id: str,
            username: str,
            *,
            session=None) -> Optional[bool]:
        d = await self.col.find_one(
            {"comment_id": comment_id, "username": username},
            {"_id": 0, "is_like": 1},
            session=session,
        )
        return bool(d["is_like"]) if d else None

    async def insert(
            self,
            comment_id: str,
            username: str,
            is_like: bool,
            *,
            session=None) -> None:
        try:
            await self.col.insert_one(
                {"comment_id": comment_id,
                 "username": username,
                 "is_like": is_like,
                 "created_at": datetime.now(timezone.utc)},
                session=session,
            )
        except DuplicateKeyError as error:
            # параллельный запрос того же пользователя успел первым
            raise ConcurrencyConflict("vote_exists") from error

    async def set_sign(
            self,
            comment_id: str,
            username: str,
            is_like: bool,
            *,
            session=None) -> bool:
        res = await self.col.update_one(
            {"comment_id": comment_id, "username": username},
            {"$set": {"is_like": is_like}},
            session=session,
        )
        return res.matched_count == 1

    async def delete(
            self,
            comment_id: str,
            username: str,
            *,
            session=None) -> Optional[bool]:
        """Удалить голос; вернуть его знак (или None, если не было)."""
        prev = await self.col.find_one_and_delete(
            {"comment_id": comment_id, "username": username},
            projection={"_id": 0, "is_like": 1},
            session=session,
        )
        return None if prev is None else bool(prev["is_like"])

    async def count(
            self,
            comment_id: str,
            is_like: bool,
            *,
            session=None) -> int:
        return await self.col.count_documents(
            {"comment_id": comment_id, "is_like": is_like},
            session=session)

    async def delete_many_by_comment(
            self,
            comment_id: str,
            *,
            session=None) -> int:
        res = await self.col.delete_many(
            {"comment_id": comment_id},
            session=session)
        return res.deleted_count
