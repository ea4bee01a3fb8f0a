import os
from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Settings are read at import time by several modules, so the test
# environment has to be in place before anything from libs/ is imported.
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("PUBLIC_API_URL", "http://test")
os.environ["ALGOLIA_APP_ID"] = "TESTAPP"
os.environ["ALGOLIA_API_KEY"] = "test-key"

from libs.common.config import get_settings  # noqa: E402

get_settings.cache_clear()

from libs.db.base import Base  # noqa: E402

# Import all models so metadata includes every table
from services.access_service import models as _access_models  # noqa: F401, E402
from services.guests_service import models as _guest_models  # noqa: F401, E402
from services.members_service import models as _member_models  # noqa: F401, E402


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield the session shared by the test body and the app under test.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    session = session_factory()

    try:
        yield session
    finally:
        await session.close()
