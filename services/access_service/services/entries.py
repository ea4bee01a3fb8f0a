"""Access log writes and the per-day entry counters."""

import copy
import uuid
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import Principal
from libs.common.logging import get_logger
from services.access_service.models import (
    AccessDirection,
    AccessLog,
    DailyEntryStats,
    empty_breakdown,
)
from services.access_service.services.lookup import ResolvedPerson
from services.members_service.models import PersonType

logger = get_logger(__name__)


async def increment_daily_stats(
    db: AsyncSession,
    stats_date: date,
    person_type: PersonType,
) -> DailyEntryStats:
    stats = await db.get(DailyEntryStats, stats_date, with_for_update=True)
    if stats is None:
        # The first entries of a day can race to create the row. The insert
        # runs in a savepoint so losing the race keeps the caller's changes.
        try:
            async with db.begin_nested():
                db.add(DailyEntryStats(stats_date=stats_date, total=0, breakdown=empty_breakdown()))
        except IntegrityError:
            logger.info(f"Stats row for {stats_date} was created by a concurrent entry")
        stats = await db.get(
            DailyEntryStats, stats_date, with_for_update=True, populate_existing=True
        )

    breakdown = copy.deepcopy(stats.breakdown or empty_breakdown())
    breakdown[person_type.value] = breakdown.get(person_type.value, 0) + 1
    stats.breakdown = breakdown
    stats.total = (stats.total or 0) + 1
    return stats


async def record_access(
    db: AsyncSession,
    *,
    person_id: str,
    person_type: PersonType,
    member_id: Optional[uuid.UUID],
    nombre: str,
    dni: str,
    direction: AccessDirection,
    recorder: Principal,
    now: datetime,
    access_date: date,
) -> AccessLog:
    """Add a log row and, for entries, bump today's counters. Caller commits."""
    log = AccessLog(
        person_id=person_id,
        person_type=person_type,
        member_id=member_id,
        nombre=nombre,
        dni=dni,
        direction=direction,
        access_date=access_date,
        recorded_at=now,
        recorded_by=recorder.user_id,
        recorded_by_name=recorder.display_name,
    )
    db.add(log)
    if direction == AccessDirection.ENTRADA:
        await increment_daily_stats(db, access_date, person_type)
    logger.info(
        f"{direction.value} recorded for {person_type.value} {dni} by {recorder.user_id}"
    )
    return log


def mark_guest_entered(person: ResolvedPerson, recorder: Principal, now: datetime) -> None:
    """Flag a guest entry as entered on its list. Guests enter once."""
    holder = person.guest_list if person.guest_list is not None else person.booking
    if holder is None:
        return
    if person.already_entered:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Guest has already entered",
        )

    guests = copy.deepcopy(holder.guests)
    for guest in guests:
        if guest.get("dni") == person.dni:
            guest["ingresado"] = True
            guest["ingresado_at"] = now.isoformat()
            guest["registrado_por"] = recorder.user_id
            guest["registrado_por_nombre"] = recorder.display_name
            person.record = guest
    holder.guests = guests


async def register_entry(
    db: AsyncSession,
    person: ResolvedPerson,
    recorder: Principal,
    now: datetime,
    today: date,
    direction: AccessDirection = AccessDirection.ENTRADA,
) -> AccessLog:
    if direction == AccessDirection.ENTRADA and person.person_type in (
        PersonType.INVITADO_DIARIO,
        PersonType.INVITADO_CUMPLEANOS,
    ):
        mark_guest_entered(person, recorder, now)

    return await record_access(
        db,
        person_id=person.person_id,
        person_type=person.person_type,
        member_id=person.member.id,
        nombre=person.display_name,
        dni=person.dni,
        direction=direction,
        recorder=recorder,
        now=now,
        access_date=today,
    )
