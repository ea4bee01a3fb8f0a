"""FastAPI application for the Members Service."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from libs.common.config import get_settings
from libs.common.container import ServiceContainer, build_container
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.members_service.routers import (
    adherents_admin_router,
    adherents_router,
    admin_router,
    family_admin_router,
    family_router,
    medical_router,
    members_router,
    photo_requests_admin_router,
    photo_requests_router,
)


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create and configure the Members Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="Club Zenith Members Service",
        version="0.1.0",
        description="Members, family groups, adherents, photo approvals and medical reviews.",
    )
    app.state.container = container or build_container(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "members"}

    app.include_router(members_router)
    app.include_router(family_router)
    app.include_router(adherents_router)
    app.include_router(photo_requests_router)
    app.include_router(medical_router)
    app.include_router(admin_router)
    app.include_router(family_admin_router)
    app.include_router(adherents_admin_router)
    app.include_router(photo_requests_admin_router)

    return app


app = create_app()
