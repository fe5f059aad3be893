import itertools
import uuid
from typing import Dict
from httpx import AsyncClient

_movie_ids = itertools.count(1000)


def new_user() -> str:
    return f"user-{uuid.uuid4().hex[:12]}"


def new_movie() -> int:
    return next(_movie_ids)


def uid_header(username: str) -> Dict[str, str]:
    return {"X-Username": username}


def admin_header(username: str = "admin-user") -> Dict[str, str]:
    return {"X-Username": username, "X-User-Role": "admin"}


async def post_comment(client: AsyncClient, movie_id: int,
                       username: str, text: str = "nice") -> dict:
    r = await client.post(f"/api/v1/movies/{movie_id}/comments",
                          json={"comment": text},
                          headers=uid_header(username))
    assert r.status_code == 201
    return r.json()


async def vote(client: AsyncClient, comment_id: str, username: str,
               is_like: bool) -> dict:
    r = await client.post(f"/api/v1/comments/{comment_id}/like",
                          json={"is_like": is_like},
                          headers=uid_header(username))
    assert r.status_code == 200
    return r.json()


async def counters(client: AsyncClient, comment_id: str) -> tuple:
    r = await client.get(f"/api/v1/comments/{comment_id}")
    assert r.status_code == 200
    body = r.json()
    return body["likes_count"], body["dislikes_count"]
