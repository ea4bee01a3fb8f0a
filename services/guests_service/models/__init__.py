"""Guests Service models package."""

from services.guests_service.models.core import (
    BirthdayBooking,
    BookingStatus,
    DailyGuestList,
    GuestPricing,
)

__all__ = [
    "BirthdayBooking",
    "BookingStatus",
    "DailyGuestList",
    "GuestPricing",
]
