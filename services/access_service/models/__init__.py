"""Access Service models package."""

from services.access_service.models.core import (
    AccessDirection,
    AccessLog,
    DailyEntryStats,
    empty_breakdown,
)

__all__ = [
    "AccessDirection",
    "AccessLog",
    "DailyEntryStats",
    "empty_breakdown",
]
