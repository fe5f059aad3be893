from datetime import datetime
from pydantic import BaseModel
from typing import List


class WatchlistPutResponse(BaseModel):
    ok: bool
    created: bool


class WatchlistDeleteResponse(BaseModel):
    ok: bool
    deleted: bool


class WatchlistItem(BaseModel):
    movie_id: int
    created_at: datetime


class WatchlistResponse(BaseModel):
    items: List[WatchlistItem]
    total: int


class WatchlistStatus(BaseModel):
    movie_id: int
    in_watchlist: bool
