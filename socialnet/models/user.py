"""
User model and the follow graph.
"""
import enum
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class RelationshipStatus(str, enum.Enum):
    SINGLE = "single"
    IN_RELATIONSHIP = "in_relationship"
    COMPLICATED = "complicated"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    profile_picture = Column(String(255))
    cover_picture = Column(String(255), default="")
    desc = Column(Text, default="")
    city = Column(String(50))
    hometown = Column(String(50))
    relationship_status = Column(
        Enum(RelationshipStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    is_admin = Column(Boolean, default=False, nullable=False)
    failed_attempts = Column(Integer, default=0, nullable=False)
    lockout_until = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    following_links = relationship(
        "Follow",
        foreign_keys="Follow.follower_id",
        back_populates="follower",
        cascade="all, delete-orphan",
        order_by="Follow.created_at",
    )
    follower_links = relationship(
        "Follow",
        foreign_keys="Follow.followed_id",
        back_populates="followed",
        cascade="all, delete-orphan",
        order_by="Follow.created_at",
    )

    @property
    def followers(self) -> List[str]:
        return [link.follower_id for link in self.follower_links]

    @property
    def followings(self) -> List[str]:
        return [link.followed_id for link in self.following_links]

    def is_locked(self, now: Optional[datetime] = None) -> bool:
        if self.lockout_until is None:
            return False
        until = self.lockout_until
        # SQLite hands back naive datetimes; they were stored as UTC
        if until.tzinfo is None:
            until = until.replace(tzinfo=timezone.utc)
        return until > (now or _utcnow())


class Follow(Base):
    """One edge of the follow graph: follower follows followed.

    Both users' sets are read from the same row, so a follow or unfollow is
    a single insert or delete and the two sides cannot drift apart.
    """
    __tablename__ = "follows"

    follower_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    followed_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    follower = relationship("User", foreign_keys=[follower_id], back_populates="following_links")
    followed = relationship("User", foreign_keys=[followed_id], back_populates="follower_links")
