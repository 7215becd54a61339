"""Dependencies shared by the routers: sessions, services and the auth gate."""
import json
from typing import Any, AsyncGenerator, Optional
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tradelog.auth.security import PasswordHasher, SessionTokenCodec
from tradelog.config.settings import Settings
from tradelog.db.repositories import TradeRepository, UserRepository
from tradelog.exceptions import BadRequestError
from tradelog.services.auth_service import AuthService, PublicUser
from tradelog.services.trade_service import TradeService

BEARER_PREFIX = "Bearer "
INVALID_PAYLOAD = "Invalid request payload."


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session for the request."""
    async with request.app.state.database.session() as session:
        yield session


def get_auth_service(request: Request, db: AsyncSession = Depends(get_db)) -> AuthService:
    hasher: PasswordHasher = request.app.state.password_hasher
    tokens: SessionTokenCodec = request.app.state.token_codec
    return AuthService(UserRepository(db), hasher, tokens)


def get_trade_service(db: AsyncSession = Depends(get_db)) -> TradeService:
    return TradeService(TradeRepository(db))


def get_session_token(request: Request) -> Optional[str]:
    """Read the token from the Authorization header, else from the cookie."""
    header = request.headers.get("Authorization")
    if header and header.startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):].strip()

    settings: Settings = request.app.state.settings
    return request.cookies.get(settings.COOKIE_NAME)


async def get_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
) -> PublicUser:
    """Gate for protected routes; raises UnauthorizedError before the handler runs."""
    user = await auth_service.current_user(get_session_token(request))
    request.state.user_id = user.id
    return user


def current_user_id(user: PublicUser) -> UUID:
    return UUID(user.id)


async def read_json_body(request: Request) -> Any:
    """Decode the request body inside the handler, after the auth gate has run."""
    body = await request.body()
    if not body.strip():
        return None
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        raise BadRequestError(INVALID_PAYLOAD)
