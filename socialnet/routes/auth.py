"""
Authentication routes: register, login, logout and token management.
"""
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ..auth import require_access_token
from ..config import get_settings
from ..database import get_db
from ..limiter import limiter
from ..schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    MessageResponse,
    Token,
    UserCreate,
    UserLogin,
)
from ..schemas.users import UserResponse
from ..services.auth import AuthResult, AuthService

settings = get_settings()

router = APIRouter(prefix="/api", tags=["auth"])

REFRESH_TOKEN_MAX_AGE = settings.refresh_token_expire_days * 24 * 3600


def set_refresh_cookie(response: Response, refresh_token: str) -> None:
    """Set the HTTP-only refresh token cookie."""
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=refresh_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=REFRESH_TOKEN_MAX_AGE,
        path="/",
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


def auth_payload(message: str, result: AuthResult) -> dict:
    return {
        "message": message,
        "user": UserResponse.model_validate(result.user),
        "accessToken": result.access_token,
    }


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.register_rate_limit)
def register(request: Request, response: Response, user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user account and sign them in."""
    result = AuthService(db).register(user_data)
    set_refresh_cookie(response, result.refresh_token)
    return auth_payload("Registration successful", result)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, response: Response, credentials: UserLogin, db: Session = Depends(get_db)):
    """Login with JSON body (email/password)."""
    result = AuthService(db).authenticate(credentials)
    set_refresh_cookie(response, result.refresh_token)
    return auth_payload("Login successful", result)


@router.post("/generate-token", response_model=Token)
@limiter.limit(settings.login_rate_limit)
def generate_token(request: Request, credentials: UserLogin, db: Session = Depends(get_db)):
    """Exchange email/password for a bare access token, without cookies."""
    result = AuthService(db).authenticate(credentials)
    return {"token": result.access_token}


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    """
    Drop the refresh cookie.

    Tokens are stateless, so an access token already handed out stays
    valid until it expires; the client should discard it.
    """
    clear_refresh_cookie(response)
    return {"message": "Logged out successfully"}


@router.post("/refresh-token", response_model=AccessTokenResponse)
@limiter.limit(settings.refresh_rate_limit)
def refresh_token(
    request: Request,
    refresh_cookie: Optional[str] = Cookie(None, alias=settings.refresh_cookie_name),
    db: Session = Depends(get_db),
):
    """Get a new short-lived access token using the refresh token cookie."""
    return {"accessToken": AuthService(db).refresh_access_token(refresh_cookie)}


@router.get("/protected", response_model=MessageResponse, dependencies=[Depends(require_access_token)])
def protected_route():
    return {"message": "Access granted to protected route"}
