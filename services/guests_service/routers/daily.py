"""Daily guest list router."""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_member, require_admin, require_staff
from libs.auth.models import Principal
from libs.common.config import get_settings
from libs.common.container import get_search
from libs.common.datetime_utils import club_today, utc_now
from libs.common.search import AlgoliaSearchClient
from libs.db.session import get_async_db
from services.access_service.services.entries import register_entry
from services.access_service.services.lookup import access_verdict, resolve_person
from services.guests_service.models import DailyGuestList
from services.guests_service.schemas import DailyGuestListResponse, DailyGuestListUpsert
from services.guests_service.services import guest_lists as guest_ops
from services.members_service.models import Member, PersonType
from services.members_service.services.search_sync import sync_daily_guests
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

settings = get_settings()
router = APIRouter(prefix="/guests/daily", tags=["daily-guests"])


@router.get("/me", response_model=Optional[DailyGuestListResponse])
async def get_my_daily_guests(
    visit_date: Optional[date] = None,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """The member's guest list for a date (today by default), or null."""
    return await guest_ops.get_daily_list(db, member.id, visit_date or club_today())


@router.put("/me", response_model=DailyGuestListResponse)
async def upsert_my_daily_guests(
    payload: DailyGuestListUpsert,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Replace today's guest list. Guests who already entered must stay."""
    today = club_today()
    guest_list, removed = await guest_ops.upsert_daily_guests(
        db, member, payload.guests, today, settings.MAX_DAILY_GUESTS
    )
    await db.commit()
    await db.refresh(guest_list)

    await sync_daily_guests(search, member, today, guest_list.guests, removed_dnis=removed)
    return guest_list


@router.get("", response_model=List[DailyGuestListResponse])
async def list_daily_guests(
    visit_date: Optional[date] = None,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """All guest lists for a date, today by default (admin only)."""
    result = await db.execute(
        select(DailyGuestList)
        .where(DailyGuestList.visit_date == (visit_date or club_today()))
        .order_by(DailyGuestList.numero_socio)
    )
    return result.scalars().all()


@router.post("/{list_id}/guests/{dni}/check-in", response_model=DailyGuestListResponse)
async def check_in_daily_guest(
    list_id: uuid.UUID,
    dni: str,
    principal: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Record a guest's arrival at the gate."""
    guest_list = await guest_ops.get_daily_list_or_404(db, list_id)
    person = await resolve_person(
        db,
        PersonType.INVITADO_DIARIO,
        guest_list.member_id,
        dni=dni,
        visit_date=guest_list.visit_date,
    )
    if person is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Guest not found on this list",
        )

    today = club_today()
    verdict = access_verdict(person, today)
    if not verdict.allowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="; ".join(verdict.reasons),
        )

    await register_entry(db, person, principal, utc_now(), today)
    await db.commit()
    await db.refresh(guest_list)
    return guest_list


@router.post("/{list_id}/titular-entered", response_model=DailyGuestListResponse)
async def mark_daily_titular_entered(
    list_id: uuid.UUID,
    _: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    guest_list = await guest_ops.get_daily_list_or_404(db, list_id)
    guest_ops.mark_titular_entered(guest_list, utc_now())
    await db.commit()
    await db.refresh(guest_list)
    return guest_list
