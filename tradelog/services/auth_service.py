"""Signup, login and session resolution."""
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel

from tradelog.auth.security import PasswordHasher, SessionTokenCodec
from tradelog.db.repositories import DuplicateCredentialError, UserRepository
from tradelog.exceptions import (
    BadRequestError, ConflictError, InvalidTokenError, UnauthorizedError
)
from tradelog.models import CredentialProvider, User
from tradelog.monitoring.logger import get_security_logger

MISSING_CREDENTIALS = "Email and password are required."
EMAIL_TAKEN = "Email is already registered."
INVALID_CREDENTIALS = "Invalid credentials."


class PublicUser(BaseModel):
    """User fields that are safe to expose."""
    id: str
    email: str
    name: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(id=str(user.id), email=user.email, name=user.name)


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a successful signup or login."""
    user: PublicUser
    token: str


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _require_credentials(email: Any, password: Any) -> str:
    """Return the normalized email, or raise if either field is unusable."""
    if not isinstance(email, str) or not isinstance(password, str):
        raise BadRequestError(MISSING_CREDENTIALS)
    normalized = normalize_email(email)
    if not normalized or not password:
        raise BadRequestError(MISSING_CREDENTIALS)
    return normalized


def _clean_name(name: Any) -> Optional[str]:
    if name is None:
        return None
    name = str(name).strip()
    return name or None


class AuthService:
    """Orchestrates credential checks and session issuance.

    Stateless: every request re-verifies its token, and logout is only a
    matter of the client dropping the cookie.
    """

    def __init__(self, users: UserRepository, hasher: PasswordHasher, tokens: SessionTokenCodec):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens
        self.security_logger = get_security_logger()

    async def signup(self, email: Any, password: Any, name: Any = None) -> AuthResult:
        normalized = _require_credentials(email, password)

        existing = await self.users.get_credential(CredentialProvider.PASSWORD, normalized)
        if existing is not None:
            self.security_logger.log_signup(normalized, success=False, reason="email taken")
            raise ConflictError(EMAIL_TAKEN)

        password_hash = await self.hasher.hash_async(password)
        try:
            user = await self.users.create_with_password(
                email=normalized,
                password_hash=password_hash,
                name=_clean_name(name)
            )
        except DuplicateCredentialError:
            self.security_logger.log_signup(normalized, success=False, reason="email taken")
            raise ConflictError(EMAIL_TAKEN)

        self.security_logger.log_signup(normalized, success=True, user_id=str(user.id))
        return self._issue(user)

    async def login(self, email: Any, password: Any) -> AuthResult:
        normalized = _require_credentials(email, password)

        credential = await self.users.get_credential(CredentialProvider.PASSWORD, normalized)
        if credential is None or not credential.password_hash:
            await self.hasher.verify_dummy_async(password)
            self.security_logger.log_authentication_attempt(normalized, success=False, reason="unknown account")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not await self.hasher.verify_async(password, credential.password_hash):
            self.security_logger.log_authentication_attempt(normalized, success=False, reason="wrong password")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        self.security_logger.log_authentication_attempt(
            normalized, success=True, user_id=str(credential.user.id)
        )
        return self._issue(credential.user)

    def logout(self) -> None:
        """Nothing to revoke server-side."""
        return None

    async def current_user(self, token: Optional[str]) -> PublicUser:
        """Resolve a session token to the user as currently stored."""
        if not token:
            raise UnauthorizedError()

        try:
            claims = self.tokens.verify(token)
            user_id = UUID(claims.subject)
        except (InvalidTokenError, ValueError) as e:
            self.security_logger.log_token_rejected(str(e))
            raise UnauthorizedError()

        user = await self.users.get_by_id(user_id)
        if user is None:
            self.security_logger.log_token_rejected("subject no longer exists", user_id=str(user_id))
            raise UnauthorizedError()

        return PublicUser.from_user(user)

    def _issue(self, user: User) -> AuthResult:
        token = self.tokens.issue(user.id, user.email)
        return AuthResult(user=PublicUser.from_user(user), token=token)
