"""Unit tests for the per-day entry counters."""

from datetime import date, datetime, timezone

import pytest
from services.access_service.models import (
    AccessDirection,
    AccessLog,
    DailyEntryStats,
    empty_breakdown,
)
from services.access_service.services.entries import increment_daily_stats
from services.members_service.models import PersonType
from sqlalchemy import func, select

TODAY = date(2026, 6, 10)
NOW = datetime(2026, 6, 10, 9, 30, tzinfo=timezone.utc)


def _log(dni: str = "30111222") -> AccessLog:
    return AccessLog(
        person_id="p-1",
        person_type=PersonType.TITULAR,
        nombre="Lucía Fernández",
        dni=dni,
        direction=AccessDirection.ENTRADA,
        access_date=TODAY,
        recorded_at=NOW,
        recorded_by="gate-1",
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_first_entry_creates_the_day_row(db_session):
    db_session.add(_log())

    stats = await increment_daily_stats(db_session, TODAY, PersonType.FAMILIAR)
    await db_session.commit()

    assert stats.total == 1
    assert stats.breakdown["familiar"] == 1
    assert stats.breakdown["titular"] == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_row_created_concurrently_is_reused(db_session, monkeypatch):
    db_session.add(
        DailyEntryStats(
            stats_date=TODAY, total=4, breakdown={**empty_breakdown(), "titular": 4}
        )
    )
    await db_session.commit()
    db_session.expunge_all()

    # The first lookup misses, as it would for a request that read before
    # another one inserted the row.
    real_get = db_session.get
    lookups = []

    async def get_missing_once(*args, **kwargs):
        lookups.append(args)
        if len(lookups) == 1:
            return None
        return await real_get(*args, **kwargs)

    monkeypatch.setattr(db_session, "get", get_missing_once)
    db_session.add(_log())

    stats = await increment_daily_stats(db_session, TODAY, PersonType.TITULAR)
    await db_session.commit()

    assert stats.total == 5
    assert stats.breakdown["titular"] == 5
    assert await db_session.scalar(select(func.count(AccessLog.id))) == 1
