"""
Shared test helpers and per-service HTTP clients.

Each client talks to the real service app over ASGITransport, with the
database session, the storage bucket and the search index swapped for
in-process versions.
"""

import uuid
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from tests.factories import StaffFactory
from tests.stubs import FakeAlgoliaIndex, InMemoryBlobStore, build_test_container


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def make_member_user(user_id: Optional[str] = None, email: Optional[str] = None) -> AuthUser:
    user_id = user_id or f"auth-{uuid.uuid4().hex[:8]}"
    return AuthUser(user_id=user_id, email=email or f"{user_id}@test.com")


async def make_staff_user(db_session: AsyncSession, role: str = "admin") -> AuthUser:
    """Insert an admin_users row with ``role`` and return the matching identity."""
    user = make_member_user()
    db_session.add(StaffFactory.create(auth_id=user.user_id, role=role, email=user.email))
    await db_session.commit()
    return user


@contextmanager
def override_auth(app, user: AuthUser):
    """Authenticate every request to ``app`` as ``user``. Roles still come from the DB."""
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_current_user, None)


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def search_index() -> FakeAlgoliaIndex:
    return FakeAlgoliaIndex()


@pytest.fixture
def test_container(blob_store, search_index):
    return build_test_container(blob_store=blob_store, search_index=search_index)


# ---------------------------------------------------------------------------
# Service clients
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _service_client(app, db_session, container) -> AsyncGenerator[AsyncClient, None]:
    original_container = app.state.container
    app.state.container = container
    app.dependency_overrides[get_async_db] = lambda: db_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
        app.state.container = original_container


@pytest_asyncio.fixture
async def members_client(db_session, test_container) -> AsyncGenerator[AsyncClient, None]:
    from services.members_service.app.main import app

    async with _service_client(app, db_session, test_container) as client:
        yield client


@pytest_asyncio.fixture
async def guests_client(db_session, test_container) -> AsyncGenerator[AsyncClient, None]:
    from services.guests_service.app.main import app

    async with _service_client(app, db_session, test_container) as client:
        yield client


@pytest_asyncio.fixture
async def access_client(db_session, test_container) -> AsyncGenerator[AsyncClient, None]:
    from services.access_service.app.main import app

    async with _service_client(app, db_session, test_container) as client:
        yield client


@pytest_asyncio.fixture
async def media_client(db_session, test_container) -> AsyncGenerator[AsyncClient, None]:
    from services.media_service.app.main import app

    async with _service_client(app, db_session, test_container) as client:
        yield client
