"""Async database engine and session configuration."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tradelog.config.settings import Settings
from tradelog.models import Base

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    """Get a database URL with an async driver."""
    if not url:
        raise ValueError("DATABASE_URL is not set")

    # Convert postgres:// to postgresql:// for compatibility
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("sqlite://"):
        url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    return url


class Database:
    """Owns the engine and session factory for one process."""

    def __init__(self, url: str, timeout: float = 10.0, pool_size: int = 5, echo: bool = False):
        self.url = normalize_database_url(url)
        self.timeout = timeout
        self.engine: AsyncEngine = self._create_engine(pool_size, echo)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            timeout=settings.DATABASE_TIMEOUT_SECONDS,
            pool_size=settings.DATABASE_POOL_SIZE,
            echo=settings.DEBUG,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def _create_engine(self, pool_size: int, echo: bool) -> AsyncEngine:
        if self.is_sqlite:
            options = {"connect_args": {"timeout": self.timeout}}
            if ":memory:" in self.url or self.url.rstrip("/").endswith("sqlite+aiosqlite:"):
                # One shared connection, otherwise every checkout sees an empty database
                options["poolclass"] = StaticPool
            return create_async_engine(self.url, echo=echo, **options)

        return create_async_engine(
            self.url,
            echo=echo,
            pool_size=pool_size,
            pool_timeout=self.timeout,
            pool_pre_ping=True,
            connect_args={"timeout": self.timeout, "command_timeout": self.timeout},
        )

    async def create_all(self) -> None:
        """Create any missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session, rolling back if the caller fails."""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def check_health(self) -> bool:
        """Check the database by executing a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(sa.text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connection closed")
