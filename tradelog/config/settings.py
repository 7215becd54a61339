from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    APP_NAME: str = "Tradelog"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    API_PREFIX: str = "/api"

    DATABASE_URL: str = "sqlite+aiosqlite:///./tradelog.db"
    DATABASE_TIMEOUT_SECONDS: float = 10.0
    DATABASE_POOL_SIZE: int = 5
    AUTO_CREATE_TABLES: bool = True

    # Session tokens
    JWT_SECRET: str = DEV_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    SESSION_TTL_DAYS: int = 7
    BCRYPT_ROUNDS: int = 10
    COOKIE_NAME: str = "auth_token"

    FRONTEND_URL: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    LOG_JSON: bool = False

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def uses_dev_secret(self) -> bool:
        return self.JWT_SECRET == DEV_JWT_SECRET

    @property
    def session_max_age(self) -> int:
        """Session lifetime in seconds, shared by the cookie and the token."""
        return self.SESSION_TTL_DAYS * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    return Settings()
