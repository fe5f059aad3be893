from http import HTTPStatus
from fastapi import APIRouter, Depends, Query, Response

from catalog_api.dependencies import get_ratings_service, username_header
from catalog_api.services.ratings_service import RatingsService
from catalog_api.models.ratings import (
    MovieRatingSummary, RatingGetResponse, RatingPutResponse,
    UserRatingsResponse,
)
from catalog_api.api.http_utils import handle_domain_errors

router = APIRouter(prefix="/api/v1", tags=["ratings"])


@router.put(
    "/movies/{movie_id}/ratings",
    response_model=RatingPutResponse,
    status_code=HTTPStatus.OK)
@handle_domain_errors()
async def set_rating(
    movie_id: int,
    rating: int = Query(..., ge=1, le=10),
    username: str = Depends(username_header),
    svc: RatingsService = Depends(get_ratings_service),
):
    return await svc.put_rating(
        movie_id=movie_id,
        username=username,
        rating=rating)


@router.get(
    "/movies/{movie_id}/ratings/me",
    response_model=RatingGetResponse,
    status_code=HTTPStatus.OK)
async def get_my_rating(
    movie_id: int,
    username: str = Depends(username_header),
    svc: RatingsService = Depends(get_ratings_service),
) -> RatingGetResponse:
    rating = await svc.get_user_rating(movie_id=movie_id, username=username)
    return RatingGetResponse(
        movie_id=movie_id,
        username=username,
        rating=rating)


@router.delete("/movies/{movie_id}/ratings",
               status_code=HTTPStatus.NO_CONTENT)
async def delete_rating(
    movie_id: int,
    username: str = Depends(username_header),
    svc: RatingsService = Depends(get_ratings_service),
) -> Response:
    await svc.delete_rating(movie_id=movie_id, username=username)
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.get(
    "/movies/{movie_id}/ratings/summary",
    response_model=MovieRatingSummary,
    status_code=HTTPStatus.OK)
async def get_rating_summary(
    movie_id: int,
    svc: RatingsService = Depends(get_ratings_service),
) -> MovieRatingSummary:
    return await svc.movie_summary(movie_id)


@router.get(
    "/users/me/ratings",
    response_model=UserRatingsResponse,
    status_code=HTTPStatus.OK)
async def list_my_ratings(
    username: str = Depends(username_header),
    svc: RatingsService = Depends(get_ratings_service),
) -> UserRatingsResponse:
    return await svc.ratings_for_user(username)
