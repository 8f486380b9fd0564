from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    desc: str = Field(..., min_length=1)
    img: Optional[str] = Field(None, max_length=255)


class PostUpdate(BaseModel):
    desc: str = Field(..., min_length=1)
    img: Optional[str] = Field(None, max_length=255)


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1)


class ReplyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    username: str
    text: str
    created_at: datetime


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    username: str
    text: str
    likes: List[str] = []
    replies: List[ReplyResponse] = []
    created_at: datetime


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    desc: str
    img: Optional[str] = None
    mentions: List[str] = []
    likes: List[str] = []
    comments: List[CommentResponse] = []
    created_at: datetime
    updated_at: Optional[datetime] = None


class PostListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    posts: List[PostResponse]
    total_pages: int = Field(..., alias="totalPages")
    current_page: int = Field(..., alias="currentPage")
    total_posts: int = Field(..., alias="totalPosts")


class PostMessageResponse(BaseModel):
    message: str
    post: PostResponse


class LikeResponse(BaseModel):
    message: str
    liked: bool
