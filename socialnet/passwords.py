"""
Password hashing with a configurable bcrypt cost factor.
"""
from functools import lru_cache

from passlib.context import CryptContext

from .config import get_settings

# bcrypt accepts cost factors in this range only
MIN_ROUNDS = 4
MAX_ROUNDS = 31


class PasswordHashError(Exception):
    """Raised when a password cannot be hashed; callers must abort, never store plaintext."""


class PasswordHasher:
    """Salted one-way hashing and constant-time verification."""

    def __init__(self, rounds: int = 10):
        if not isinstance(rounds, int) or not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
            raise PasswordHashError(f"Invalid bcrypt cost factor: {rounds!r}")
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Hash a password for storage."""
        if not password:
            raise PasswordHashError("Cannot hash an empty password")
        try:
            return self._context.hash(password)
        except (ValueError, TypeError) as e:
            raise PasswordHashError(str(e)) from e

    def verify(self, password: str, hashed_password: str) -> bool:
        """Verify a password against its hash. Unknown hash formats never match."""
        try:
            return self._context.verify(password, hashed_password)
        except (ValueError, TypeError):
            return False

    def dummy_verify(self) -> None:
        """Spend the same time as a real verify, for logins with an unknown email."""
        self._context.dummy_verify()


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_password_hash(password: str) -> str:
    return get_password_hasher().hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return get_password_hasher().verify(plain_password, hashed_password)
