from .auth import AuthService, AuthResult
from .users import UserService
from .posts import PostService

__all__ = ["AuthService", "AuthResult", "UserService", "PostService"]
