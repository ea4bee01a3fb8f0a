"""Guests Service schemas package."""

from services.guests_service.schemas.guests import (  # noqa: F401
    BirthdayBookingCreate,
    BirthdayBookingResponse,
    BirthdayBookingUpdate,
    DailyGuestListResponse,
    DailyGuestListUpsert,
    GuestEntry,
    GuestInput,
    GuestPricingResponse,
    GuestPricingUpdate,
)
