"""Comments: posting, editing, sorted listing and like/dislike votes."""

from __future__ import annotations

import logging
from typing import List

from catalog_api.core.errors import Forbidden, InvalidArgument, NotFound
from catalog_api.models.comments import (
    COMMENT_MAX_LEN,
    CommentItem,
    CommentListResponse,
    CommentSort,
    RecountResponse,
    VoteState,
)
from catalog_api.services.counter_reconciler import (
    COMMENT_NOT_FOUND,
    CounterReconciler,
)
from catalog_api.services.repositories.base import Store

logger = logging.getLogger(__name__)


def _check_text(text: str) -> str:
    if not 1 <= len(text) <= COMMENT_MAX_LEN:
        raise InvalidArgument('comment_length_invalid')
    return text


class EngagementService:
    """Business logic for comments; counters go through the reconciler."""

    def __init__(self, store: Store,
                 reconciler: CounterReconciler | None = None) -> None:
        self.store = store
        self.reconciler = reconciler or CounterReconciler(store)

    # ---------- helpers ----------

    async def _get_owned(self, comment_id: str, username: str) -> dict:
        comment = await self.store.comments.get(comment_id)
        if comment is None:
            raise NotFound(COMMENT_NOT_FOUND)
        if comment['username'] != username:
            raise Forbidden('not_comment_author')
        return comment

    # ---------- CREATE / READ ----------

    async def create_comment(
            self,
            movie_id: int,
            username: str,
            text: str) -> CommentItem:
        rec = await self.store.comments.insert(
            movie_id, username, _check_text(text))
        logger.info('comment_created',
                    extra={'comment_id': rec['id'], 'movie_id': movie_id})
        return CommentItem.from_record(rec)

    async def get_comment(self, comment_id: str) -> CommentItem:
        rec = await self.store.comments.get(comment_id)
        if rec is None:
            raise NotFound(COMMENT_NOT_FOUND)
        return CommentItem.from_record(rec)

    async def comments_sorted_by(
            self,
            movie_id: int,
            mode: CommentSort | str = CommentSort.newest,
    ) -> CommentListResponse:
        """Movie comments; every mode but newest breaks ties newest-first."""
        try:
            sort = CommentSort(mode)
        except ValueError as error:
            raise InvalidArgument('unknown_sort_mode') from error
        docs = await self.store.comments.list_by_movie(movie_id, sort.value)
        items: List[CommentItem] = [CommentItem.from_record(d) for d in docs]
        return CommentListResponse(items=items, total=len(items))

    async def comments_by_user(self, username: str) -> CommentListResponse:
        docs = await self.store.comments.list_by_user(username)
        items = [CommentItem.from_record(d) for d in docs]
        return CommentListResponse(items=items, total=len(items))

    # ---------- UPDATE / DELETE (author) ----------

    async def update_comment_text(
            self,
            comment_id: str,
            username: str,
            text: str) -> CommentItem:
        _check_text(text)
        await self._get_owned(comment_id, username)
        rec = await self.store.comments.update_text(comment_id, text)
        if rec is None:
            raise NotFound(COMMENT_NOT_FOUND)
        return CommentItem.from_record(rec)

    async def delete_own_comment(self, comment_id: str, username: str) -> None:
        await self._get_owned(comment_id, username)
        await self.reconciler.delete_comment_cascade(comment_id)

    # ---------- ADMIN ----------

    async def admin_delete_comment(self, comment_id: str) -> None:
        await self.reconciler.delete_comment_cascade(comment_id)

    async def admin_delete_user_comments(self, username: str) -> int:
        return await self.reconciler.delete_all_for_user(username)

    async def recount_comment(self, comment_id: str) -> RecountResponse:
        return await self.reconciler.recount_comment(comment_id)

    # ---------- VOTES ----------

    async def like_or_dislike(
            self,
            comment_id: str,
            username: str,
            is_like: bool) -> CommentItem:
        return await self.reconciler.apply_vote(comment_id, username, is_like)

    async def remove_like(self, comment_id: str, username: str) -> CommentItem:
        return await self.reconciler.remove_vote(comment_id, username)

    async def vote_state(self, comment_id: str, username: str) -> VoteState:
        return await self.reconciler.query_vote_state(comment_id, username)

    async def has_liked(self, comment_id: str, username: str) -> bool:
        return (await self.vote_state(comment_id, username)).liked

    async def has_disliked(self, comment_id: str, username: str) -> bool:
        return (await self.vote_state(comment_id, username)).disliked
