"""Counter Reconciler: the only writer of comment like/dislike counters.

Every vote transition runs in one store transaction that touches both the
vote row and the comment counters, so after each call::

    likes_count == votes(is_like=True), dislikes_count == votes(is_like=False)
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from catalog_api.core.errors import (
    AggregateFailure,
    ConcurrencyConflict,
    InvalidArgument,
    NotFound,
    WriteConflict,
)
from catalog_api.models.comments import (
    CommentItem,
    RecountResponse,
    VoteState,
)
from catalog_api.services.repositories.base import Store

logger = logging.getLogger(__name__)

COMMENT_NOT_FOUND = 'comment_not_found'
EMPTY_VOTE_TARGET = 'empty_vote_target'

# votes of different users still share the comment document, so a
# transaction can lose a write race; it is rerun up to this many times
TRANSACTION_ATTEMPTS = 3


def vote_delta(old: Optional[bool], new: Optional[bool]) -> tuple[int, int]:
    """(likes, dislikes) deltas for a vote going from `old` to `new`.

    ``None`` means "no vote". A decrement only ever comes from an
    existing vote of that sign.
    """
    likes = dislikes = 0
    if old is True:
        likes -= 1
    elif old is False:
        dislikes -= 1
    if new is True:
        likes += 1
    elif new is False:
        dislikes += 1
    return likes, dislikes


def _check_target(comment_id: str, username: str) -> None:
    if not comment_id or not username:
        raise InvalidArgument(EMPTY_VOTE_TARGET)


class CounterReconciler:
    """Vote transitions, cascades and counter repair for comments."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def _transactional(
            self,
            step: Callable[..., Awaitable[Any]],
            *args: Any) -> Any:
        """Run ``step(session, *args)`` in a transaction, rerun on conflict."""
        for attempt in range(1, TRANSACTION_ATTEMPTS + 1):
            try:
                async with self.store.transaction() as session:
                    return await step(session, *args)
            except WriteConflict:
                if attempt == TRANSACTION_ATTEMPTS:
                    raise
                logger.info('transaction_conflict_retry',
                            extra={'step': step.__name__,
                                   'attempt': attempt})

    # ---------- VOTE ----------

    async def apply_vote(
            self,
            comment_id: str,
            username: str,
            is_like: bool) -> CommentItem:
        """Like (True) or dislike (False); same-sign repeat is a no-op."""
        _check_target(comment_id, username)
        try:
            return await self._transactional(
                self._apply_vote_step, comment_id, username, is_like)
        except WriteConflict:
            raise
        except ConcurrencyConflict:
            # another request of the same user inserted the vote first:
            # re-read and take the update-in-place path
            logger.info('vote_conflict_retry',
                        extra={'comment_id': comment_id,
                               'username': username})
            return await self._transactional(
                self._apply_vote_step, comment_id, username, is_like)

    async def _apply_vote_step(
            self,
            session,
            comment_id: str,
            username: str,
            is_like: bool) -> CommentItem:
        comment = await self.store.comments.get(comment_id, session=session)
        if comment is None:
            raise NotFound(COMMENT_NOT_FOUND)

        old = await self.store.votes.get(
            comment_id, username, session=session)
        if old is is_like:
            return CommentItem.from_record(comment)

        if old is None:
            await self.store.votes.insert(
                comment_id, username, is_like, session=session)
        else:
            await self.store.votes.set_sign(
                comment_id, username, is_like, session=session)

        likes, dislikes = vote_delta(old, is_like)
        updated = await self.store.comments.inc_counters(
            comment_id, likes, dislikes, session=session)
        if updated is None:
            raise NotFound(COMMENT_NOT_FOUND)
        return CommentItem.from_record(updated)

    # ---------- UNVOTE ----------

    async def remove_vote(self, comment_id: str, username: str) -> CommentItem:
        """Drop the user's vote; without one the comment is returned as is."""
        _check_target(comment_id, username)
        return await self._transactional(
            self._remove_vote_step, comment_id, username)

    async def _remove_vote_step(
            self,
            session,
            comment_id: str,
            username: str) -> CommentItem:
        comment = await self.store.comments.get(comment_id, session=session)
        if comment is None:
            raise NotFound(COMMENT_NOT_FOUND)

        old = await self.store.votes.delete(
            comment_id, username, session=session)
        if old is None:
            return CommentItem.from_record(comment)

        likes, dislikes = vote_delta(old, None)
        # counters are floored at 0 by the store update itself
        updated = await self.store.comments.inc_counters(
            comment_id, likes, dislikes, session=session)
        return CommentItem.from_record(updated or comment)

    async def query_vote_state(
            self, comment_id: str, username: str) -> VoteState:
        _check_target(comment_id, username)
        vote = await self.store.votes.get(comment_id, username)
        return VoteState(liked=vote is True, disliked=vote is False)

    # ---------- DELETE ----------

    async def delete_comment_cascade(self, comment_id: str) -> None:
        """Delete the comment's votes, then the comment, atomically."""
        votes = await self._transactional(self._cascade_step, comment_id)
        logger.info('comment_deleted',
                    extra={'comment_id': comment_id, 'votes_deleted': votes})

    async def _cascade_step(self, session, comment_id: str) -> int:
        if await self.store.comments.get(comment_id, session=session) is None:
            raise NotFound(COMMENT_NOT_FOUND)
        votes = await self.store.votes.delete_many_by_comment(
            comment_id, session=session)
        await self.store.comments.delete(comment_id, session=session)
        return votes

    async def delete_all_for_user(self, username: str) -> int:
        """Cascade-delete every comment of the user.

        All comments are attempted; if any failed, AggregateFailure lists
        the ids still present so the caller can retry just those. A comment
        gone before its turn counts as deleted.
        """
        comment_ids = await self.store.comments.ids_by_user(username)
        failed: list[str] = []
        deleted = 0
        for comment_id in comment_ids:
            try:
                await self.delete_comment_cascade(comment_id)
            except NotFound:
                logger.info('comment_already_deleted',
                            extra={'comment_id': comment_id,
                                   'username': username})
            except Exception as error:
                logger.error('comment_cascade_failed',
                             extra={'comment_id': comment_id,
                                    'username': username,
                                    'err': str(error)})
                failed.append(comment_id)
            else:
                deleted += 1
        if failed:
            raise AggregateFailure(username, failed)
        return deleted

    # ---------- REPAIR ----------

    async def recount_comment(self, comment_id: str) -> RecountResponse:
        """Rebuild both counters from vote rows; report the drift found."""
        comment, updated, likes, dislikes = await self._transactional(
            self._recount_step, comment_id)

        drift_likes = comment['likes_count'] - likes
        drift_dislikes = comment['dislikes_count'] - dislikes
        if drift_likes or drift_dislikes:
            logger.warning('comment_counter_drift',
                           extra={'comment_id': comment_id,
                                  'drift_likes': drift_likes,
                                  'drift_dislikes': drift_dislikes})
        return RecountResponse(
            comment=CommentItem.from_record(updated or comment),
            drift_likes=drift_likes,
            drift_dislikes=drift_dislikes,
        )

    async def _recount_step(self, session, comment_id: str):
        comment = await self.store.comments.get(comment_id, session=session)
        if comment is None:
            raise NotFound(COMMENT_NOT_FOUND)
        likes = await self.store.votes.count(
            comment_id, True, session=session)
        dislikes = await self.store.votes.count(
            comment_id, False, session=session)
        updated = await self.store.comments.set_counters(
            comment_id, likes, dislikes, session=session)
        return comment, updated, likes, dislikes
