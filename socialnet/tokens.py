"""
JWT issuance and verification for access and refresh tokens.

Each kind is signed with its own secret and carries its kind in the
"type" claim, so a refresh token is never accepted where an access token
is expected (and the other way round).
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from .config import Settings, get_settings


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenFailure(str, Enum):
    EXPIRED = "expired"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class TokenCheck:
    """Outcome of verify(): a payload on success, a failure reason otherwise."""
    payload: Optional[Dict[str, Any]] = None
    failure: Optional[TokenFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.payload is not None

    @property
    def subject(self) -> Optional[str]:
        return self.payload.get("sub") if self.payload else None


class TokenService:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=7),
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Token secrets must not be empty")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens need distinct secrets")
        self._secrets = {TokenKind.ACCESS: access_secret, TokenKind.REFRESH: refresh_secret}
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            settings.access_token_secret,
            settings.refresh_token_secret,
            algorithm=settings.algorithm,
            access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
        )

    def issue(
        self,
        kind: TokenKind,
        subject_id: str,
        ttl: timedelta,
        now: Optional[datetime] = None,
        **claims: Any,
    ) -> str:
        """Sign a token for subject_id that expires ttl after now."""
        issued_at = now or datetime.now(timezone.utc)
        to_encode = {k: v for k, v in claims.items() if v is not None}
        to_encode.update({
            "sub": str(subject_id),  # JWT sub claim must be a string
            "type": kind.value,
            "iat": issued_at,
            "exp": issued_at + ttl,
        })
        return jwt.encode(to_encode, self._secrets[kind], algorithm=self.algorithm)

    def issue_access(self, subject_id: str, ttl: Optional[timedelta] = None, **claims: Any) -> str:
        return self.issue(TokenKind.ACCESS, subject_id, self.access_ttl if ttl is None else ttl, **claims)

    def issue_refresh(self, subject_id: str, ttl: Optional[timedelta] = None, **claims: Any) -> str:
        return self.issue(TokenKind.REFRESH, subject_id, self.refresh_ttl if ttl is None else ttl, **claims)

    def verify(self, token: Any, kind: TokenKind) -> TokenCheck:
        """Check signature, expiry and kind. Never raises on bad input."""
        if not isinstance(token, str) or not token:
            return TokenCheck(failure=TokenFailure.MALFORMED)
        try:
            payload = jwt.decode(token, self._secrets[kind], algorithms=[self.algorithm])
        except ExpiredSignatureError:
            return TokenCheck(failure=TokenFailure.EXPIRED)
        except (JWTError, ValueError, TypeError, KeyError, AttributeError):
            return TokenCheck(failure=TokenFailure.MALFORMED)

        if payload.get("type") != kind.value or not payload.get("sub"):
            return TokenCheck(failure=TokenFailure.MALFORMED)
        return TokenCheck(payload=payload)


@lru_cache()
def get_token_service() -> TokenService:
    return TokenService.from_settings(get_settings())
