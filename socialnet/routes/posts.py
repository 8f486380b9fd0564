"""
Post routes: CRUD, likes, comments and replies.
"""
from typing import List, Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import get_current_user, require_access_token
from ..database import get_db
from ..models.user import User
from ..schemas.auth import MessageResponse
from ..schemas.posts import (
    CommentCreate,
    LikeResponse,
    PostCreate,
    PostListResponse,
    PostMessageResponse,
    PostResponse,
    PostUpdate,
)
from ..services.posts import PostService

router = APIRouter(
    prefix="/api",
    tags=["posts"],
    dependencies=[Depends(require_access_token)],
)


@router.post("/createPost", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post_data: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a post owned by the caller; @handles in desc become mentions."""
    return PostService(db).create(current_user, post_data)


@router.get("/getAllPosts", response_model=PostListResponse)
def get_all_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
):
    posts, total = PostService(db).list(page, limit, sort_by, order)
    return {
        "posts": posts,
        "totalPages": (total + limit - 1) // limit,
        "currentPage": page,
        "totalPosts": total,
    }


@router.get("/getPost/{post_id}", response_model=PostResponse)
def get_post(post_id: str, db: Session = Depends(get_db)):
    return PostService(db).get(post_id)


@router.get("/getPostsByUser/{user_id}", response_model=List[PostResponse])
def get_posts_by_user(user_id: str, db: Session = Depends(get_db)):
    """All posts of one user, newest first."""
    return PostService(db).list_by_user(user_id)


@router.put("/updatePost/{post_id}", response_model=PostResponse)
def update_post(
    post_id: str,
    post_update: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return PostService(db).update(current_user, post_id, post_update)


@router.delete("/deletePost/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    PostService(db).delete(current_user, post_id)
    return {"message": "Post deleted successfully"}


@router.put("/likePost/{post_id}", response_model=LikeResponse)
def like_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Toggle the caller's like on a post."""
    liked = PostService(db).toggle_like(current_user, post_id)
    message = "Post has been liked" if liked else "Post has been disliked"
    return {"message": message, "liked": liked}


@router.put("/likeComment/{post_id}/{comment_id}", response_model=LikeResponse)
def like_comment(
    post_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    liked = PostService(db).toggle_comment_like(current_user, post_id, comment_id)
    message = "Comment has been liked" if liked else "Comment has been unliked"
    return {"message": message, "liked": liked}


@router.put("/addComment/{post_id}/comments", response_model=PostMessageResponse)
def add_comment(
    post_id: str,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = PostService(db).add_comment(current_user, post_id, comment.text)
    return {"message": "Comment added successfully", "post": post}


@router.put("/updateComment/{post_id}/comments/{comment_id}", response_model=PostResponse)
def update_comment(
    post_id: str,
    comment_id: str,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return PostService(db).update_comment(current_user, post_id, comment_id, comment.text)


@router.delete("/deleteComment/{post_id}/comments/{comment_id}", response_model=PostMessageResponse)
def delete_comment(
    post_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = PostService(db).delete_comment(current_user, post_id, comment_id)
    return {"message": "Comment deleted successfully", "post": post}


@router.put("/replyComment/{post_id}/comments/{comment_id}", response_model=PostResponse)
def reply_to_comment(
    post_id: str,
    comment_id: str,
    reply: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return PostService(db).reply(current_user, post_id, comment_id, reply.text)


@router.delete(
    "/deleteReply/{post_id}/comments/{comment_id}/replies/{reply_id}",
    response_model=PostMessageResponse,
)
def delete_reply(
    post_id: str,
    comment_id: str,
    reply_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = PostService(db).delete_reply(current_user, post_id, comment_id, reply_id)
    return {"message": "Reply deleted successfully", "post": post}
