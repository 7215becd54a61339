"""Authentication API endpoints."""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from tradelog.auth.dependencies import get_app_settings, get_auth_service, get_current_user
from tradelog.config.settings import Settings
from tradelog.services.auth_service import AuthService, PublicUser

router = APIRouter(prefix="/auth", tags=["authentication"])


class SignupRequest(BaseModel):
    """Signup request. Presence is checked by the service so a gap is a 400."""
    email: Optional[Any] = None
    password: Optional[Any] = None
    name: Optional[Any] = None


class LoginRequest(BaseModel):
    email: Optional[Any] = None
    password: Optional[Any] = None


class UserEnvelope(BaseModel):
    user: PublicUser


class SuccessResponse(BaseModel):
    success: bool = True


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=settings.session_max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


@router.post("/signup", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings)
):
    """Create an account and start a session."""
    result = await auth_service.signup(body.email, body.password, body.name)
    set_session_cookie(response, result.token, settings)
    return UserEnvelope(user=result.user)


@router.post("/login", response_model=UserEnvelope)
async def login(
    body: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings)
):
    """Login with email and password."""
    result = await auth_service.login(body.email, body.password)
    set_session_cookie(response, result.token, settings)
    return UserEnvelope(user=result.user)


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_app_settings)
):
    """Drop the session cookie. Tokens are not tracked server-side."""
    auth_service.logout()
    clear_session_cookie(response, settings)
    return SuccessResponse()


@router.get("/me", response_model=UserEnvelope)
async def me(current_user: PublicUser = Depends(get_current_user)):
    """Get current user information."""
    return UserEnvelope(user=current_user)
