"""Dashboard API endpoints."""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tradelog.auth.dependencies import get_current_user
from tradelog.services.auth_service import PublicUser

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class MessageResponse(BaseModel):
    message: str


@router.get("", response_model=MessageResponse)
async def dashboard(current_user: PublicUser = Depends(get_current_user)):
    """Greet the signed-in user."""
    return MessageResponse(message=f"Welcome back, {current_user.name or current_user.email}.")
