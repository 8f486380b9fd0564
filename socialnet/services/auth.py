"""Registration, login and token refresh."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..logging_config import auth_logger
from ..models.user import User
from ..passwords import PasswordHashError, PasswordHasher, get_password_hasher
from ..responses import AuthenticationError, ConflictError, InternalError
from ..schemas.auth import UserCreate, UserLogin
from ..tokens import TokenKind, TokenService, get_token_service

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class AuthResult:
    user: User
    access_token: str
    refresh_token: str


class AuthService:
    """Credential checks and token issuance against the user store."""

    def __init__(
        self,
        db: Session,
        hasher: Optional[PasswordHasher] = None,
        tokens: Optional[TokenService] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.hasher = hasher or get_password_hasher()
        self.tokens = tokens or get_token_service()
        self.settings = settings or get_settings()

    def _issue_pair(self, user: User) -> tuple:
        access_token = self.tokens.issue_access(user.id, email=user.email)
        refresh_token = self.tokens.issue_refresh(user.id, email=user.email)
        return access_token, refresh_token

    def register(self, data: UserCreate) -> AuthResult:
        """Create the user and its first token pair in one transaction."""
        if self.db.query(User.id).filter(User.email == data.email).first():
            raise ConflictError("Email already exists")
        if self.db.query(User.id).filter(User.username == data.username).first():
            raise ConflictError("Username already exists")

        try:
            user = User(
                username=data.username,
                email=data.email,
                hashed_password=self.hasher.hash(data.password),
            )
            self.db.add(user)
            self.db.flush()
            access_token, refresh_token = self._issue_pair(user)
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email/username
            self.db.rollback()
            raise ConflictError("Error during registering")
        except (PasswordHashError, SQLAlchemyError, JWTError) as e:
            self.db.rollback()
            auth_logger.error("Registration failed", error=e)
            raise InternalError("Error during registering")

        auth_logger.info("User registered", user_id=user.id)
        return AuthResult(user, access_token, refresh_token)

    def authenticate(self, credentials: UserLogin) -> AuthResult:
        """
        Check email and password. Unknown email and wrong password produce
        the same message; repeated failures lock the account for a while.
        """
        user = self.db.query(User).filter(User.email == credentials.email).first()
        if user is None:
            self.hasher.dummy_verify()
            raise AuthenticationError(INVALID_CREDENTIALS)

        now = datetime.now(timezone.utc)
        if user.is_locked(now):
            # Same answer as an unknown email; the lockout shows only in the log
            self.hasher.dummy_verify()
            auth_logger.warning("Login attempt on locked account", user_id=user.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not self.hasher.verify(credentials.password, user.hashed_password):
            self._record_failure(user, now)
            raise AuthenticationError(INVALID_CREDENTIALS)

        user.failed_attempts = 0
        user.lockout_until = None
        access_token, refresh_token = self._issue_pair(user)
        self._commit("login")
        auth_logger.info("User logged in", user_id=user.id)
        return AuthResult(user, access_token, refresh_token)

    def _record_failure(self, user: User, now: datetime) -> None:
        user.failed_attempts = (user.failed_attempts or 0) + 1
        auth_logger.info("Failed login", user_id=user.id, failed_attempts=user.failed_attempts)
        if user.failed_attempts >= self.settings.max_failed_logins:
            user.lockout_until = now + timedelta(minutes=self.settings.lockout_minutes)
            user.failed_attempts = 0
            auth_logger.warning(
                "Account locked after repeated failed logins",
                user_id=user.id,
                lockout_minutes=self.settings.lockout_minutes,
            )
        self._commit("record failed login")

    def refresh_access_token(self, refresh_token: Optional[str]) -> str:
        """Mint a short-lived access token for the refresh token's subject."""
        if not refresh_token:
            raise AuthenticationError("No refresh token provided")

        check = self.tokens.verify(refresh_token, TokenKind.REFRESH)
        if not check.ok:
            auth_logger.info("Rejected refresh token", reason=check.failure.value)
            raise AuthenticationError("Invalid refresh token", status_code=403)

        # Verify user still exists
        if self.db.get(User, check.subject) is None:
            raise AuthenticationError("Invalid refresh token", status_code=403)

        return self.tokens.issue_access(
            check.subject,
            ttl=timedelta(minutes=self.settings.refreshed_access_token_expire_minutes),
            email=check.payload.get("email"),
        )

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            auth_logger.error(f"Failed to {action}", error=e)
            raise InternalError("Error during login")
