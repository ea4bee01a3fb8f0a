"""Guests service routers package."""

from services.guests_service.routers.birthdays import router as birthdays_router
from services.guests_service.routers.daily import router as daily_router
from services.guests_service.routers.pricing import router as pricing_router

__all__ = ["birthdays_router", "daily_router", "pricing_router"]
