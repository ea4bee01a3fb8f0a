from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "test", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "America/Argentina/Buenos_Aires"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    PUBLIC_API_URL: str = "http://localhost:8000"

    # Database
    DATABASE_URL: str
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Supabase
    # Default placeholder values keep local/test runs from failing when Supabase
    # credentials are not required. Real deployments should override via env.
    SUPABASE_URL: str = "http://localhost"
    SUPABASE_SERVICE_ROLE_KEY: str = "test-service-role-key"
    SUPABASE_JWT_SECRET: str = "test-jwt-secret"
    SUPABASE_STORAGE_BUCKET: str = "clubzenith-private"

    # Image encryption (AES-256-GCM, 64 hex chars)
    IMAGE_ENCRYPTION_KEY: Optional[str] = None

    # Image compression
    IMAGE_MAX_DIMENSION: int = 1280
    IMAGE_QUALITY: int = 70
    IMAGE_COMPRESSION_TIMEOUT: float = 10.0

    # Algolia search index
    ALGOLIA_APP_ID: str = ""
    ALGOLIA_API_KEY: str = ""
    ALGOLIA_INDEX_NAME: str = "socios"
    ALGOLIA_TIMEOUT: float = 10.0

    # Business rules
    FIRST_MEMBER_NUMBER: int = 10000
    MAX_DAILY_GUESTS: int = 15
    MAX_BIRTHDAY_GUESTS: int = 50
    PHOTO_RECONCILE_GRACE_MINUTES: int = 30

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def algolia_enabled(self) -> bool:
        return bool(self.ALGOLIA_APP_ID and self.ALGOLIA_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
