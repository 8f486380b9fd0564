"""
Post aggregate: the post row owns its likes, comments, replies and comment likes.
"""
from typing import List

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from ..database import Base
from .user import _new_id, _utcnow


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=_new_id)
    # Not a foreign key: a deleted user's posts stay in place
    user_id = Column(String(36), nullable=False, index=True)
    desc = Column(Text, nullable=False)
    img = Column(String(255), nullable=True)
    mentions = Column(JSON, default=list)  # ordered user ids resolved from @handles
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    like_links = relationship(
        "PostLike",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostLike.created_at",
    )
    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.position",
        collection_class=ordering_list("position"),
    )

    @property
    def likes(self) -> List[str]:
        return [link.user_id for link in self.like_links]

    def find_comment(self, comment_id: str):
        return next((c for c in self.comments if c.id == comment_id), None)


class PostLike(Base):
    __tablename__ = "post_likes"

    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), primary_key=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    post = relationship("Post", back_populates="like_links")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=_new_id)
    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    user_id = Column(String(36), nullable=False)
    # Snapshot of the author's username at write time, never re-synced
    username = Column(String(50), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    post = relationship("Post", back_populates="comments")
    replies = relationship(
        "Reply",
        back_populates="comment",
        cascade="all, delete-orphan",
        order_by="Reply.position",
        collection_class=ordering_list("position"),
    )
    like_links = relationship(
        "CommentLike",
        back_populates="comment",
        cascade="all, delete-orphan",
        order_by="CommentLike.created_at",
    )

    @property
    def likes(self) -> List[str]:
        return [link.user_id for link in self.like_links]

    def find_reply(self, reply_id: str):
        return next((r for r in self.replies if r.id == reply_id), None)


class CommentLike(Base):
    __tablename__ = "comment_likes"

    comment_id = Column(String(36), ForeignKey("comments.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), primary_key=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    comment = relationship("Comment", back_populates="like_links")


class Reply(Base):
    __tablename__ = "replies"

    id = Column(String(36), primary_key=True, default=_new_id)
    comment_id = Column(String(36), ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    user_id = Column(String(36), nullable=False)
    username = Column(String(50), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    comment = relationship("Comment", back_populates="replies")
