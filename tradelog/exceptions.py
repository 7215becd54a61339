"""Error types shared by the services and the HTTP layer."""
from typing import Optional

from fastapi import status


class TradelogError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class BadRequestError(TradelogError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST


class TradeValidationError(BadRequestError):
    """A trade payload field failed validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class UnauthorizedError(TradelogError):
    """Missing, invalid or expired session, or bad credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ConflictError(TradelogError):
    """The signup identifier is already taken."""

    status_code = status.HTTP_409_CONFLICT


class InvalidTokenError(Exception):
    """Session token failed signature, expiry or structure checks."""
