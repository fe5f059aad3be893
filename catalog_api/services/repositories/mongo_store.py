"""Mongo-backed store: repositories plus session transactions."""

from __future__ import annotations

from contextlib import asynccontextmanager

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from catalog_api.core.errors import WriteConflict
from .comments_repo import CommentsRepo
from .ratings_repo import RatingsRepo
from .votes_repo import VotesRepo
from .watchlist_repo import WatchlistRepo


class MongoStore:
    """Repositories over one database; transactions need a replica set."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self.comments = CommentsRepo(db)
        self.votes = VotesRepo(db)
        self.ratings = RatingsRepo(db)
        self.watchlist = WatchlistRepo(db)

    @property
    def client(self):
        return self.db.client

    @asynccontextmanager
    async def transaction(self):
        """Open mongo session + transaction and yield session."""
        try:
            async with await self.client.start_session() as session:
                async with session.start_transaction():
                    yield session
        except PyMongoError as error:
            if error.has_error_label('TransientTransactionError'):
                # write conflict with a concurrent transaction on same doc
                raise WriteConflict() from error
            raise
