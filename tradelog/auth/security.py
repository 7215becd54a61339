"""Password hashing and session token utilities."""
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Any, Optional, Union

from fastapi.concurrency import run_in_threadpool
from jose import JWTError, jwt
from passlib.context import CryptContext

from tradelog.exceptions import InvalidTokenError

DEFAULT_BCRYPT_ROUNDS = 10
ALGORITHM = "HS256"
SESSION_TOKEN_EXPIRE_DAYS = 7
DUMMY_PASSWORD = "tradelog-no-such-account"


class PasswordHasher:
    """Salted bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds
        self._dummy_hash: Optional[str] = None
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        """Hash password using bcrypt."""
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """Verify password against hash. Malformed hashes never verify."""
        if not hashed_password:
            return False
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError):
            return False

    async def hash_async(self, password: str) -> str:
        return await run_in_threadpool(self.hash, password)

    def verify_dummy(self, plain_password: str) -> bool:
        """Run one full verification against a fixed hash. Always False.

        Used when there is no stored hash, so a failed login costs the same
        whether or not the account exists.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash(DUMMY_PASSWORD)
        self.verify(plain_password, self._dummy_hash)
        return False

    async def verify_async(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        return await run_in_threadpool(self.verify, plain_password, hashed_password)

    async def verify_dummy_async(self, plain_password: str) -> bool:
        return await run_in_threadpool(self.verify_dummy, plain_password)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified session token."""
    subject: str
    email: Optional[str]


class SessionTokenCodec:
    """Issue and verify signed, time-limited session tokens (JWT)."""

    def __init__(
        self,
        secret: str,
        algorithm: str = ALGORITHM,
        ttl: timedelta = timedelta(days=SESSION_TOKEN_EXPIRE_DAYS)
    ):
        if not secret:
            raise ValueError("Session token secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(
        self,
        user_id: Union[str, Any],
        email: str,
        issued_at: Optional[datetime] = None
    ) -> str:
        """Create a session token for a user."""
        issued_at = issued_at or datetime.now(UTC)
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.ttl
        }
        return jwt.encode(to_encode, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode and validate a session token."""
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Missing token")

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        subject = payload.get("sub")
        if not subject or not isinstance(subject, str):
            raise InvalidTokenError("Invalid token payload")
        if "exp" not in payload:
            raise InvalidTokenError("Token has no expiry")

        return TokenClaims(subject=subject, email=payload.get("email"))
