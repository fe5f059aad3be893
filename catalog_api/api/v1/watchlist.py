from http import HTTPStatus
from fastapi import APIRouter, Depends, Query

from catalog_api.dependencies import username_header, get_watchlist_service
from catalog_api.services.watchlist_service import WatchlistService
from catalog_api.models.watchlist import (
    WatchlistDeleteResponse, WatchlistPutResponse,
    WatchlistResponse, WatchlistStatus,
)

router = APIRouter(prefix="/api/v1/watchlist", tags=["watchlist"])


@router.put(
    "/{movie_id}",
    response_model=WatchlistPutResponse,
    status_code=HTTPStatus.OK)
async def add_to_watchlist(
    movie_id: int,
    username: str = Depends(username_header),
    svc: WatchlistService = Depends(get_watchlist_service),
):
    return await svc.add(username=username, movie_id=movie_id)


@router.delete(
    "/{movie_id}",
    response_model=WatchlistDeleteResponse,
    status_code=HTTPStatus.OK)
async def remove_from_watchlist(
    movie_id: int,
    username: str = Depends(username_header),
    svc: WatchlistService = Depends(get_watchlist_service),
):
    return await svc.remove(username=username, movie_id=movie_id)


@router.get(
    "/{movie_id}",
    response_model=WatchlistStatus,
    status_code=HTTPStatus.OK)
async def watchlist_status(
    movie_id: int,
    username: str = Depends(username_header),
    svc: WatchlistService = Depends(get_watchlist_service),
):
    return await svc.contains(username=username, movie_id=movie_id)


@router.get(
    "",
    response_model=WatchlistResponse,
    status_code=HTTPStatus.OK)
async def list_watchlist(
    username: str = Depends(username_header),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    svc: WatchlistService = Depends(get_watchlist_service),
):
    return await svc.list(username=username, limit=limit, offset=offset)
