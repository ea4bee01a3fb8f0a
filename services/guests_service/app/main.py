"""FastAPI application for the Guests Service."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from libs.common.config import get_settings
from libs.common.container import ServiceContainer, build_container
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.guests_service.routers import birthdays_router, daily_router, pricing_router


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create and configure the Guests Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="Club Zenith Guests Service",
        version="0.1.0",
        description="Daily guest lists, birthday bookings and guest pricing.",
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
        return {"status": "ok", "service": "guests"}

    app.include_router(pricing_router)
    app.include_router(daily_router)
    app.include_router(birthdays_router)

    return app


app = create_app()
