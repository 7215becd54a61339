import logging
import time
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tradelog import __version__
from tradelog.api.auth import router as auth_router
from tradelog.api.dashboard import router as dashboard_router
from tradelog.api.health import router as health_router
from tradelog.api.trades import router as trades_router
from tradelog.auth.security import PasswordHasher, SessionTokenCodec
from tradelog.config.settings import Settings, get_settings
from tradelog.db.session import Database
from tradelog.exceptions import TradelogError
from tradelog.middleware.monitoring import RequestMonitoringMiddleware
from tradelog.monitoring.logger import get_main_logger, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    main_logger = get_main_logger()
    main_logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")

    if settings.uses_dev_secret:
        if settings.is_production:
            main_logger.error("JWT_SECRET is not set; session tokens are signed with the development fallback")
        else:
            main_logger.warning("JWT_SECRET is not set; using the development fallback secret")

    if settings.AUTO_CREATE_TABLES:
        await app.state.database.create_all()

    main_logger.info("Application startup complete")
    yield

    main_logger.info("Shutting down application")
    await app.state.database.dispose()
    main_logger.info("Application shutdown complete")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TradelogError)
    async def tradelog_error_handler(request: Request, exc: TradelogError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request payload."}
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error."}
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    setup_logging(
        log_level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
        log_file=settings.LOG_FILE,
        enable_json_logging=settings.LOG_JSON or settings.is_production
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=__version__,
        lifespan=lifespan
    )

    # Process-wide collaborators, read-only after startup
    app.state.settings = settings
    app.state.database = Database.from_settings(settings)
    app.state.password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.token_codec = SessionTokenCodec(
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        ttl=timedelta(days=settings.SESSION_TTL_DAYS)
    )
    app.state.started_at = time.monotonic()

    register_exception_handlers(app)

    app.add_middleware(
        RequestMonitoringMiddleware,
        enable_detailed_logging=settings.DEBUG
    )

    # CORS middleware (last - furthest from the app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix=settings.API_PREFIX)
    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(dashboard_router, prefix=settings.API_PREFIX)
    app.include_router(trades_router, prefix=settings.API_PREFIX)

    @app.get("/")
    async def root():
        return {"message": f"{settings.APP_NAME} API", "version": __version__}

    return app


app = create_app()
