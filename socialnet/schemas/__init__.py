from .auth import UserCreate, UserLogin, AuthResponse, AccessTokenResponse, Token, MessageResponse
from .users import UserResponse, UserUpdate, UserEnvelope
from .posts import (
    PostCreate,
    PostUpdate,
    CommentCreate,
    PostResponse,
    PostListResponse,
    PostMessageResponse,
    LikeResponse,
)

__all__ = [
    "UserCreate", "UserLogin", "AuthResponse", "AccessTokenResponse", "Token", "MessageResponse",
    "UserResponse", "UserUpdate", "UserEnvelope",
    "PostCreate", "PostUpdate", "CommentCreate", "PostResponse", "PostListResponse",
    "PostMessageResponse", "LikeResponse",
]
