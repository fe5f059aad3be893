from pydantic import BaseModel, Field
from enum import Enum
from typing import List, Optional
from datetime import datetime

COMMENT_MAX_LEN = 1200


class CommentSort(str, Enum):
    newest = "newest"
    likes = "likes"
    dislikes = "dislikes"
    rating = "rating"  # likes - dislikes


class CommentRequest(BaseModel):
    comment: str = Field(min_length=1, max_length=COMMENT_MAX_LEN)


class CommentItem(BaseModel):
    id: str
    comment: str
    username: str
    movie_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    likes_count: int = Field(ge=0)
    dislikes_count: int = Field(ge=0)

    @classmethod
    def from_record(cls, rec: dict) -> "CommentItem":
        return cls(
            id=rec["id"],
            comment=rec["text"],
            username=rec["username"],
            movie_id=rec["movie_id"],
            created_at=rec["created_at"],
            updated_at=rec.get("updated_at"),
            likes_count=rec["likes_count"],
            dislikes_count=rec["dislikes_count"],
        )


class CommentListResponse(BaseModel):
    items: List[CommentItem]
    total: int


class CommentVoteRequest(BaseModel):
    is_like: bool


class VoteState(BaseModel):
    liked: bool = False
    disliked: bool = False


class RecountResponse(BaseModel):
    comment: CommentItem
    drift_likes: int
    drift_dislikes: int
