"""Access service routers package."""

from services.access_service.routers.access import router as access_router

__all__ = ["access_router"]
