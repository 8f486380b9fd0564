"""
Request authentication: bearer access token -> caller identity.

require_access_token is attached as a router-level dependency to every
protected router, so no protected handler runs without a verified token.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .database import get_db
from .logging_config import auth_logger
from .models.user import User
from .responses import AuthenticationError
from .tokens import TokenFailure, TokenKind, get_token_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/generate-token", auto_error=False)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def require_access_token(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
) -> str:
    """Verify the bearer token and attach the subject id to request.state."""
    if not token:
        raise AuthenticationError("Not authenticated", headers=BEARER_CHALLENGE)

    check = get_token_service().verify(token, TokenKind.ACCESS)
    if not check.ok:
        auth_logger.info(
            "Rejected access token",
            reason=check.failure.value,
            path=request.url.path,
        )
        message = "Token expired" if check.failure == TokenFailure.EXPIRED else "Invalid token"
        raise AuthenticationError(message, headers=BEARER_CHALLENGE)

    request.state.user_id = check.subject
    return check.subject


def get_current_user(
    user_id: str = Depends(require_access_token),
    db: Session = Depends(get_db),
) -> User:
    """Load the caller's record. A token for a deleted user is no longer valid."""
    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Invalid token", headers=BEARER_CHALLENGE)
    return user
