from http import HTTPStatus
from fastapi import APIRouter, Depends, Query, Response

from catalog_api.dependencies import username_header, get_engagement_service
from catalog_api.services.engagement_service import EngagementService
from catalog_api.models.comments import (
    CommentItem, CommentListResponse, CommentRequest,
    CommentSort, CommentVoteRequest, VoteState,
)
from catalog_api.api.http_utils import handle_domain_errors

router = APIRouter(prefix="/api/v1", tags=["comments"])


@router.post("/movies/{movie_id}/comments", response_model=CommentItem,
             status_code=HTTPStatus.CREATED)
@handle_domain_errors()
async def create_comment(
    movie_id: int,
    body: CommentRequest,
    username: str = Depends(username_header),
    svc: EngagementService = Depends(get_engagement_service),
):
    return await svc.create_comment(movie_id=movie_id,
                                    username=username,
                                    text=body.comment)


@router.get("/movies/{movie_id}/comments",
            response_model=CommentListResponse,
            status_code=HTTPStatus.OK)
@handle_domain_errors()
async def list_movie_comments(
    movie_id: int,
    sort_by: CommentSort = Query(CommentSort.newest),
    svc: EngagementService = Depends(get_engagement_service),
):
    return await svc.comments_sorted_by(movie_id, sort_by)


@router.get("/comments/{comment_id}", response_model=CommentItem,
            status_code=HTTPStatus.OK)
@handle_domain_errors()
async def get_comment(
    comment_id: str,
    svc: EngagementService = Depends(get_engagement_service),
):
    return await svc.get_comment(comment_id)


@router.put("/comments/{comment_id}", response_model=CommentItem,
            status_code=HTTPStatus.OK)
@handle_domain_errors()
async def update_comment(
    comment_id: str,
    body: CommentRequest,
    username: str = Depends(username_header),
    svc: EngagementService = Depends(get_engagement_service),
):
    return await svc.update_comment_text(comment_id=comment_id,
                                         username=username,
                                         text=body.comment)


@router.delete("/comments/{comment_id}", status_code=HTTPStatus.NO_CONTENT)
@handle_domain_errors()
async def delete_comment(
    comment_id: str,
    username: str = Depends(username_header),
    svc: EngagementService = Depends(get_engagement_service),
) -> Response:
    await svc.delete_own_comment(comment_id=comment_id, username=username)
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.post("/comments/{comment_id}/like", response_model=CommentItem,
             status_code=HTTPStatus.OK)
@handle_domain_errors()
async def like_or_dislike_comment(
    comment_id: str,
    body: CommentVoteRequest,
    username: str = Depends(username_header),
    svc: EngagementService = Depends(get_engagement_service),
):
    return await svc.like_or_dislike(comment_id=comment_id,
                                     username=username,
                                     is_like=body.is_like)


@router.delete("/comments/{comment_id}/like", response_model=CommentItem,
               status_code=HTTPStatus.OK)
@handle_domain_errors()
async def remove_comment_vote(
    comment_id: str,
    username: str = Depends(username_header),
    svc: EngagementService = Depends(get_engagement_service),
):
    return await svc.remove_like(comment_id=comment_id, username=username)


@router.get("/comments/{comment_id}/like/status", response_model=VoteState,
            status_code=HTTPStatus.OK)
@handle_domain_errors()
async def get_vote_status(
    comment_id: str,
    username: str = Depends(username_header),
    svc: EngagementService = Depends(get_engagement_service),
):
    return await svc.vote_state(comment_id=comment_id, username=username)


@router.get("/users/{username}/comments",
            response_model=CommentListResponse,
            status_code=HTTPStatus.OK)
@handle_domain_errors()
async def list_user_comments(
    username: str,
    svc: EngagementService = Depends(get_engagement_service),
):
    return await svc.comments_by_user(username)
