"""Media Service main application."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from libs.common.config import get_settings
from libs.common.container import ServiceContainer, build_container
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.media_service.routers.media import router as media_router


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Create and configure the Media Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="Club Zenith Media Service",
        version="0.1.0",
        description="Encrypted image storage and image proxy.",
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
        return {"status": "ok", "service": "media"}

    app.include_router(media_router)

    return app


app = create_app()
