import time
from datetime import datetime, UTC

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from tradelog import __version__

router = APIRouter(tags=["health"])

SERVICE_NAME = "tradelog-api"


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    service: str
    version: str


class DetailedHealthResponse(HealthResponse):
    database: str
    uptime_seconds: float


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health():
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        service=SERVICE_NAME,
        version=__version__
    )


@router.get("/health/detailed", response_model=DetailedHealthResponse, status_code=status.HTTP_200_OK)
async def health_detailed(request: Request):
    database_healthy = await request.app.state.database.check_health()

    return DetailedHealthResponse(
        status="healthy" if database_healthy else "degraded",
        timestamp=datetime.now(UTC),
        service=SERVICE_NAME,
        version=__version__,
        database="healthy" if database_healthy else "unhealthy",
        uptime_seconds=round(time.monotonic() - request.app.state.started_at, 3)
    )
