"""Posts, likes, comments and replies."""

import re
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..logging_config import posts_logger, timed
from ..models.post import Comment, CommentLike, Post, PostLike, Reply
from ..models.user import User
from ..responses import (
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
    parse_id,
)
from ..schemas.posts import PostCreate, PostUpdate

MENTION_PATTERN = re.compile(r"@(\w+)")

SORT_FIELDS = {
    "createdAt": Post.created_at,
    "updatedAt": Post.updated_at,
}


class PostService:
    """Service for post CRUD, like toggles and the comment tree."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------
    # Mentions
    # ------------------------------------------------------------

    def resolve_mentions(self, text: str) -> List[str]:
        """
        Map each @handle in text to a user id, in order of first appearance.
        Handles that match no user are dropped.
        """
        handles = list(dict.fromkeys(MENTION_PATTERN.findall(text or "")))
        if not handles:
            return []
        rows = self.db.query(User.username, User.id).filter(User.username.in_(handles)).all()
        ids_by_username = {username: user_id for username, user_id in rows}
        return [ids_by_username[h] for h in handles if h in ids_by_username]

    # ------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------

    def get(self, post_id: str) -> Post:
        post_id = parse_id(post_id, "post")
        post = self.db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def _check_owner_or_admin(self, actor: User, owner_id: str, action: str) -> None:
        if actor.is_admin or actor.id == owner_id:
            return
        posts_logger.warning(f"Denied {action}", actor_id=actor.id, owner_id=owner_id)
        raise AuthorizationError(f"You are not authorized to {action}")

    @timed(posts_logger)
    def create(self, owner: User, data: PostCreate) -> Post:
        post = Post(
            user_id=owner.id,
            desc=data.desc,
            img=data.img,
            mentions=self.resolve_mentions(data.desc),
        )
        self.db.add(post)
        self._commit("create post")
        posts_logger.info("Post created", post_id=post.id, user_id=owner.id, mentions=len(post.mentions))
        return post

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        order: str = "desc",
    ) -> Tuple[List[Post], int]:
        """One page of posts plus the total post count."""
        if sort_by not in SORT_FIELDS:
            raise ValidationError(f"Cannot sort by '{sort_by}'", {"allowed": list(SORT_FIELDS)})
        column = SORT_FIELDS[sort_by]
        posts = (
            self.db.query(Post)
            .order_by(column.desc() if order == "desc" else column.asc(), Post.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        total = self.db.query(func.count(Post.id)).scalar() or 0
        return posts, total

    def list_by_user(self, user_id: str) -> List[Post]:
        user_id = parse_id(user_id, "user")
        return (
            self.db.query(Post)
            .filter(Post.user_id == user_id)
            .order_by(Post.created_at.desc(), Post.id)
            .all()
        )

    @timed(posts_logger)
    def update(self, actor: User, post_id: str, data: PostUpdate) -> Post:
        post = self.get(post_id)
        self._check_owner_or_admin(actor, post.user_id, "update this post")

        post.desc = data.desc
        if "img" in data.model_fields_set:
            post.img = data.img
        # Full replacement, never a merge with the previous list
        post.mentions = self.resolve_mentions(data.desc)
        self._commit("update post")
        return post

    @timed(posts_logger)
    def delete(self, actor: User, post_id: str) -> None:
        post = self.get(post_id)
        self._check_owner_or_admin(actor, post.user_id, "delete this post")
        self.db.delete(post)
        self._commit("delete post")
        posts_logger.info("Post deleted", post_id=post.id, actor_id=actor.id)

    @timed(posts_logger)
    def toggle_like(self, actor: User, post_id: str) -> bool:
        """Like the post, or unlike it if the actor already does. Returns the new state."""
        post = self.get(post_id)
        existing = next((link for link in post.like_links if link.user_id == actor.id), None)
        if existing is not None:
            post.like_links.remove(existing)
        else:
            post.like_links.append(PostLike(user_id=actor.id))
        self._commit("like post")
        return existing is None

    # ------------------------------------------------------------
    # Comments and replies
    # ------------------------------------------------------------

    def _get_comment(self, post: Post, comment_id: str) -> Comment:
        comment_id = parse_id(comment_id, "comment")
        comment = post.find_comment(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    @timed(posts_logger)
    def add_comment(self, author: User, post_id: str, text: str) -> Post:
        post = self.get(post_id)
        # The author's username is copied now and not kept in sync afterwards
        post.comments.append(Comment(user_id=author.id, username=author.username, text=text))
        self._commit("add comment")
        return post

    @timed(posts_logger)
    def update_comment(self, actor: User, post_id: str, comment_id: str, text: str) -> Post:
        post = self.get(post_id)
        comment = self._get_comment(post, comment_id)
        if not (actor.is_admin or actor.id == comment.user_id):
            raise AuthorizationError("You are not authorized to update this comment")
        comment.text = text
        self._commit("update comment")
        return post

    @timed(posts_logger)
    def delete_comment(self, actor: User, post_id: str, comment_id: str) -> Post:
        """Remove a comment and its replies. An unknown comment id changes nothing."""
        post = self.get(post_id)
        comment = post.find_comment(parse_id(comment_id, "comment"))
        if comment is None:
            return post
        if not (actor.is_admin or actor.id in (comment.user_id, post.user_id)):
            raise AuthorizationError("You are not authorized to delete this comment")
        post.comments.remove(comment)
        self._commit("delete comment")
        return post

    @timed(posts_logger)
    def toggle_comment_like(self, actor: User, post_id: str, comment_id: str) -> bool:
        post = self.get(post_id)
        comment = self._get_comment(post, comment_id)
        existing = next((link for link in comment.like_links if link.user_id == actor.id), None)
        if existing is not None:
            comment.like_links.remove(existing)
        else:
            comment.like_links.append(CommentLike(user_id=actor.id))
        self._commit("like comment")
        return existing is None

    @timed(posts_logger)
    def reply(self, author: User, post_id: str, comment_id: str, text: str) -> Post:
        post = self.get(post_id)
        comment = self._get_comment(post, comment_id)
        comment.replies.append(Reply(user_id=author.id, username=author.username, text=text))
        self._commit("reply to comment")
        return post

    @timed(posts_logger)
    def delete_reply(self, actor: User, post_id: str, comment_id: str, reply_id: str) -> Post:
        """
        Remove a reply matched by both its comment id and its own id. If either
        does not match, nothing changes; only a missing post is an error.
        """
        post = self.get(post_id)
        comment_id = parse_id(comment_id, "comment")
        reply_id = parse_id(reply_id, "reply")

        comment: Optional[Comment] = post.find_comment(comment_id)
        reply = comment.find_reply(reply_id) if comment is not None else None
        if reply is None:
            return post
        if not (actor.is_admin or actor.id in (reply.user_id, post.user_id)):
            raise AuthorizationError("You are not authorized to delete this reply")
        comment.replies.remove(reply)
        self._commit("delete reply")
        return post

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            # e.g. two concurrent likes by the same user
            self.db.rollback()
            raise ConflictError(f"Could not {action}: conflicting change, retry")
        except SQLAlchemyError as e:
            self.db.rollback()
            posts_logger.error(f"Failed to {action}", error=e)
            raise InternalError(f"Could not {action}")
