"""Members service routers package."""

from services.members_service.routers.adherents import admin_router as adherents_admin_router
from services.members_service.routers.adherents import router as adherents_router
from services.members_service.routers.admin import router as admin_router
from services.members_service.routers.family import admin_router as family_admin_router
from services.members_service.routers.family import router as family_router
from services.members_service.routers.medical import router as medical_router
from services.members_service.routers.members import router as members_router
from services.members_service.routers.photo_requests import (
    admin_router as photo_requests_admin_router,
)
from services.members_service.routers.photo_requests import router as photo_requests_router

__all__ = [
    "adherents_admin_router",
    "adherents_router",
    "admin_router",
    "family_admin_router",
    "family_router",
    "medical_router",
    "members_router",
    "photo_requests_admin_router",
    "photo_requests_router",
]
