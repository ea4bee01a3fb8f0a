from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from libs.common.config import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """
    Return the process-wide async engine, created on first use.
    """
    settings = get_settings()
    engine_kwargs = {
        # echo=True for local dev to see SQL queries
        "echo": settings.ENVIRONMENT == "local" and settings.DB_ECHO,
        "future": True,
        "pool_pre_ping": True,  # Test connections before using
    }
    if not settings.DATABASE_URL.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    return create_async_engine(settings.DATABASE_URL, **engine_kwargs)


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_engine(), class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
