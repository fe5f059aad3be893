"""Counter reconciler invariants: counters always mirror vote rows."""

from __future__ import annotations

import asyncio

import pytest

from catalog_api.core.errors import (
    AggregateFailure,
    ConcurrencyConflict,
    InvalidArgument,
    NotFound,
    WriteConflict,
)
from catalog_api.services.counter_reconciler import (
    TRANSACTION_ATTEMPTS,
    CounterReconciler,
    vote_delta,
)


async def make_comment(store, username="author", movie_id=1, text="t"):
    rec = await store.comments.insert(movie_id, username, text)
    return rec['id']


async def assert_counters_match_votes(store, comment_id):
    rec = await store.comments.get(comment_id)
    assert rec['likes_count'] == await store.votes.count(comment_id, True)
    assert rec['dislikes_count'] == await store.votes.count(comment_id, False)


@pytest.mark.parametrize('old, new, expected', [
    (None, True, (1, 0)),
    (None, False, (0, 1)),
    (True, False, (-1, 1)),
    (False, True, (1, -1)),
    (True, None, (-1, 0)),
    (False, None, (0, -1)),
    (True, True, (0, 0)),
])
def test_vote_delta(old, new, expected):
    assert vote_delta(old, new) == expected


async def test_scenario_like_dislike_switch_remove(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)

    c = await rec.apply_vote(cid, 'a', True)
    assert (c.likes_count, c.dislikes_count) == (1, 0)
    c = await rec.apply_vote(cid, 'b', False)
    assert (c.likes_count, c.dislikes_count) == (1, 1)
    c = await rec.apply_vote(cid, 'a', False)
    assert (c.likes_count, c.dislikes_count) == (0, 2)
    c = await rec.remove_vote(cid, 'a')
    assert (c.likes_count, c.dislikes_count) == (0, 1)
    await assert_counters_match_votes(store, cid)


async def test_repeated_same_sign_vote_is_idempotent(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)

    first = await rec.apply_vote(cid, 'a', True)
    second = await rec.apply_vote(cid, 'a', True)
    assert (first.likes_count, first.dislikes_count) == (1, 0)
    assert (second.likes_count, second.dislikes_count) == (1, 0)
    assert (await rec.query_vote_state(cid, 'a')).liked is True


async def test_like_then_dislike_moves_one_count(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    await rec.apply_vote(cid, 'x', True)
    await rec.apply_vote(cid, 'y', False)
    before = await store.comments.get(cid)

    liked = await rec.apply_vote(cid, 'u', True)
    after = await rec.apply_vote(cid, 'u', False)

    assert after.likes_count == liked.likes_count - 1
    assert after.dislikes_count == liked.dislikes_count + 1
    assert after.likes_count == before['likes_count']
    assert after.dislikes_count == before['dislikes_count'] + 1
    await assert_counters_match_votes(store, cid)


async def test_remove_without_vote_is_noop(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    await rec.apply_vote(cid, 'a', True)

    c = await rec.remove_vote(cid, 'nobody')
    assert (c.likes_count, c.dislikes_count) == (1, 0)


async def test_remove_after_vote_restores_counters(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    await rec.apply_vote(cid, 'a', False)
    before = await store.comments.get(cid)

    await rec.apply_vote(cid, 'b', False)
    c = await rec.remove_vote(cid, 'b')
    assert c.likes_count == before['likes_count']
    assert c.dislikes_count == before['dislikes_count']


async def test_remove_vote_floors_drifted_counter_at_zero(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    await rec.apply_vote(cid, 'a', True)
    # simulate historical drift
    await store.comments.set_counters(cid, 0, 0)

    c = await rec.remove_vote(cid, 'a')
    assert c.likes_count == 0
    assert await store.votes.get(cid, 'a') is None


async def test_counters_match_votes_after_every_call(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    steps = [
        ('apply', 'u1', True), ('apply', 'u2', True), ('apply', 'u3', False),
        ('apply', 'u1', False), ('remove', 'u2', None),
        ('apply', 'u2', False), ('remove', 'u9', None),
        ('apply', 'u3', True), ('remove', 'u1', None),
    ]
    for op, user, is_like in steps:
        if op == 'apply':
            await rec.apply_vote(cid, user, is_like)
        else:
            await rec.remove_vote(cid, user)
        await assert_counters_match_votes(store, cid)


async def test_vote_on_missing_comment_raises_not_found(store):
    rec = CounterReconciler(store)
    with pytest.raises(NotFound):
        await rec.apply_vote('000000000000000000000000', 'a', True)
    with pytest.raises(NotFound):
        await rec.remove_vote('000000000000000000000000', 'a')


async def test_query_vote_state_without_vote(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    state = await rec.query_vote_state(cid, 'a')
    assert state.liked is False and state.disliked is False

    await rec.apply_vote(cid, 'a', False)
    state = await rec.query_vote_state(cid, 'a')
    assert state.liked is False and state.disliked is True


async def test_concurrent_votes_of_same_user_count_once(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)

    await asyncio.gather(*[rec.apply_vote(cid, 'a', True) for _ in range(5)])

    c = await store.comments.get(cid)
    assert (c['likes_count'], c['dislikes_count']) == (1, 0)


async def test_insert_conflict_is_retried_as_update(store, monkeypatch):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    real_insert = store.votes.insert
    calls = {'n': 0}

    async def racing_insert(comment_id, username, is_like, *, session=None):
        # a concurrent request inserts the opposite vote first
        calls['n'] += 1
        await real_insert(comment_id, username, not is_like)
        await store.comments.inc_counters(
            comment_id, *vote_delta(None, not is_like))
        raise ConcurrencyConflict('vote_exists')

    monkeypatch.setattr(store.votes, 'insert', racing_insert)
    c = await rec.apply_vote(cid, 'a', True)

    assert calls['n'] == 1
    assert (c.likes_count, c.dislikes_count) == (1, 0)
    await assert_counters_match_votes(store, cid)


async def test_delete_comment_cascade_removes_votes_first(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    await rec.apply_vote(cid, 'a', True)
    await rec.apply_vote(cid, 'b', False)

    await rec.delete_comment_cascade(cid)

    assert await store.comments.get(cid) is None
    assert await store.votes.get(cid, 'a') is None
    assert await store.votes.get(cid, 'b') is None
    with pytest.raises(NotFound):
        await rec.delete_comment_cascade(cid)


async def test_delete_all_for_user_reports_partial_failure(
        store, monkeypatch):
    rec = CounterReconciler(store)
    ok_id = await make_comment(store, username='x')
    bad_id = await make_comment(store, username='x')
    other_id = await make_comment(store, username='y')
    await rec.apply_vote(ok_id, 'a', True)
    await rec.apply_vote(bad_id, 'a', True)

    real_delete_many = store.votes.delete_many_by_comment

    async def flaky_delete_many(comment_id, *, session=None):
        if comment_id == bad_id:
            raise RuntimeError('disk on fire')
        return await real_delete_many(comment_id, session=session)

    monkeypatch.setattr(store.votes, 'delete_many_by_comment',
                        flaky_delete_many)

    with pytest.raises(AggregateFailure) as e:
        await rec.delete_all_for_user('x')

    assert e.value.username == 'x'
    assert e.value.failed == [bad_id]
    assert 'x' in str(e.value)
    assert await store.comments.get(ok_id) is None
    assert await store.votes.get(ok_id, 'a') is None
    assert await store.comments.get(bad_id) is not None
    assert await store.comments.get(other_id) is not None


async def test_delete_all_for_user_returns_deleted_count(store):
    rec = CounterReconciler(store)
    await make_comment(store, username='x')
    await make_comment(store, username='x')
    assert await rec.delete_all_for_user('x') == 2
    assert await store.comments.list_by_user('x') == []


async def test_recount_repairs_drift(store):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    await rec.apply_vote(cid, 'a', True)
    await rec.apply_vote(cid, 'b', True)
    await store.comments.set_counters(cid, 5, 3)

    result = await rec.recount_comment(cid)

    assert (result.comment.likes_count, result.comment.dislikes_count) == \
        (2, 0)
    assert (result.drift_likes, result.drift_dislikes) == (3, 3)
    await assert_counters_match_votes(store, cid)


@pytest.mark.parametrize('comment_id, username', [
    ('', 'alice'),
    ('000000000000000000000000', ''),
])
async def test_empty_vote_target_is_invalid_argument(
        store, comment_id, username):
    rec = CounterReconciler(store)
    with pytest.raises(InvalidArgument) as e:
        await rec.apply_vote(comment_id, username, True)
    assert e.value.detail == 'empty_vote_target'
    with pytest.raises(InvalidArgument):
        await rec.remove_vote(comment_id, username)
    with pytest.raises(InvalidArgument):
        await rec.query_vote_state(comment_id, username)


async def test_remove_vote_reruns_after_write_conflict(store, monkeypatch):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    await rec.apply_vote(cid, 'a', True)
    await rec.apply_vote(cid, 'b', True)
    real_delete = store.votes.delete
    calls = {'n': 0}

    async def contended_delete(comment_id, username, *, session=None):
        # a concurrent vote on the same comment wins the first attempt
        calls['n'] += 1
        if calls['n'] == 1:
            raise WriteConflict()
        return await real_delete(comment_id, username, session=session)

    monkeypatch.setattr(store.votes, 'delete', contended_delete)
    c = await rec.remove_vote(cid, 'a')

    assert calls['n'] == 2
    assert (c.likes_count, c.dislikes_count) == (1, 0)
    await assert_counters_match_votes(store, cid)


async def test_cascade_reruns_after_write_conflict(store, monkeypatch):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    await rec.apply_vote(cid, 'a', False)
    real_delete_many = store.votes.delete_many_by_comment
    calls = {'n': 0}

    async def contended_delete_many(comment_id, *, session=None):
        calls['n'] += 1
        if calls['n'] == 1:
            raise WriteConflict()
        return await real_delete_many(comment_id, session=session)

    monkeypatch.setattr(store.votes, 'delete_many_by_comment',
                        contended_delete_many)
    await rec.delete_comment_cascade(cid)

    assert calls['n'] == 2
    assert await store.comments.get(cid) is None


async def test_persistent_write_conflict_gives_up_after_bounded_attempts(
        store, monkeypatch):
    rec = CounterReconciler(store)
    cid = await make_comment(store)
    calls = {'n': 0}

    async def always_conflicting(*args, **kwargs):
        calls['n'] += 1
        raise WriteConflict()

    monkeypatch.setattr(store.votes, 'get', always_conflicting)
    with pytest.raises(WriteConflict):
        await rec.apply_vote(cid, 'a', True)

    # a transient conflict is not mistaken for a duplicate vote
    assert calls['n'] == TRANSACTION_ATTEMPTS
    c = await store.comments.get(cid)
    assert (c['likes_count'], c['dislikes_count']) == (0, 0)


async def test_delete_all_for_user_skips_comment_deleted_meanwhile(
        store, monkeypatch):
    rec = CounterReconciler(store)
    first = await make_comment(store, username='x')
    second = await make_comment(store, username='x')
    await rec.apply_vote(second, 'a', True)
    real_delete_many = store.votes.delete_many_by_comment

    async def author_deletes_other(comment_id, *, session=None):
        # the author removes the other comment while the batch runs
        other = second if comment_id == first else first
        await real_delete_many(other)
        await store.comments.delete(other)
        return await real_delete_many(comment_id, session=session)

    monkeypatch.setattr(store.votes, 'delete_many_by_comment',
                        author_deletes_other)

    assert await rec.delete_all_for_user('x') == 1
    assert await store.comments.get(first) is None
    assert await store.comments.get(second) is None
