from datetime import datetime
from pydantic import BaseModel
from typing import List, Optional


class RatingPutResponse(BaseModel):
    movie_id: int
    rating: int


class RatingGetResponse(BaseModel):
    movie_id: int
    username: str
    rating: Optional[int]  # None если пользователь не оценивал


class MovieRatingSummary(BaseModel):
    movie_id: int
    average_rating: float  # 0.0, если оценок нет (см. rating_count)
    rating_count: int


class UserRatingItem(BaseModel):
    movie_id: int
    rating: int
    updated_at: Optional[datetime] = None


class UserRatingsResponse(BaseModel):
    username: str
    items: List[UserRatingItem]
