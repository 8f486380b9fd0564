from .user import User, Follow, RelationshipStatus
from .post import Post, PostLike, Comment, CommentLike, Reply

__all__ = [
    "User",
    "Follow",
    "RelationshipStatus",
    "Post",
    "PostLike",
    "Comment",
    "CommentLike",
    "Reply",
]
