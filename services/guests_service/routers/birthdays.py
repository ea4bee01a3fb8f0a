"""Birthday booking router."""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_member, require_admin, require_staff
from libs.auth.models import Principal
from libs.common.config import get_settings
from libs.common.datetime_utils import club_today, utc_now
from libs.db.session import get_async_db
from services.access_service.services.entries import register_entry
from services.access_service.services.lookup import access_verdict, resolve_person
from services.guests_service.models import BirthdayBooking, BookingStatus
from services.guests_service.schemas import (
    BirthdayBookingCreate,
    BirthdayBookingResponse,
    BirthdayBookingUpdate,
)
from services.guests_service.services import guest_lists as guest_ops
from services.members_service.models import Member, PersonType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

settings = get_settings()
router = APIRouter(prefix="/guests/birthdays", tags=["birthday-bookings"])


@router.get("/me", response_model=List[BirthdayBookingResponse])
async def list_my_bookings(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(BirthdayBooking)
        .where(BirthdayBooking.member_id == member.id)
        .order_by(BirthdayBooking.event_date.desc())
    )
    return result.scalars().all()


@router.post("/me", response_model=BirthdayBookingResponse, status_code=status.HTTP_201_CREATED)
async def create_my_booking(
    payload: BirthdayBookingCreate,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Book the member's birthday event. One booking per calendar year."""
    booking = await guest_ops.create_booking(
        db, member, payload, club_today(), settings.MAX_BIRTHDAY_GUESTS
    )
    await db.commit()
    await db.refresh(booking)
    return booking


@router.patch("/me/{booking_id}", response_model=BirthdayBookingResponse)
async def update_my_booking(
    booking_id: uuid.UUID,
    payload: BirthdayBookingUpdate,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    booking = await guest_ops.get_member_booking_or_404(db, booking_id, member)
    await guest_ops.update_booking(
        db, booking, payload, club_today(), settings.MAX_BIRTHDAY_GUESTS
    )
    await db.commit()
    await db.refresh(booking)
    return booking


@router.post("/me/{booking_id}/cancel", response_model=BirthdayBookingResponse)
async def cancel_my_booking(
    booking_id: uuid.UUID,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    booking = await guest_ops.get_member_booking_or_404(db, booking_id, member)
    guest_ops.cancel_booking(booking, club_today())
    await db.commit()
    await db.refresh(booking)
    return booking


@router.get("", response_model=List[BirthdayBookingResponse])
async def list_bookings(
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    include_cancelled: bool = False,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Bookings in a date range, ordered by event date (admin only)."""
    query = select(BirthdayBooking).order_by(BirthdayBooking.event_date)
    if from_date:
        query = query.where(BirthdayBooking.event_date >= from_date)
    if to_date:
        query = query.where(BirthdayBooking.event_date <= to_date)
    if not include_cancelled:
        query = query.where(BirthdayBooking.status == BookingStatus.APROBADA)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/{booking_id}/guests/{dni}/check-in", response_model=BirthdayBookingResponse)
async def check_in_birthday_guest(
    booking_id: uuid.UUID,
    dni: str,
    principal: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Record a birthday guest's arrival on the event day."""
    booking = await guest_ops.get_booking_or_404(db, booking_id)
    person = await resolve_person(
        db,
        PersonType.INVITADO_CUMPLEANOS,
        booking.member_id,
        dni=dni,
        booking_id=booking.id,
    )
    if person is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Guest not found on this booking",
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
    await db.refresh(booking)
    return booking


@router.post("/{booking_id}/titular-entered", response_model=BirthdayBookingResponse)
async def mark_birthday_titular_entered(
    booking_id: uuid.UUID,
    _: Principal = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    booking = await guest_ops.get_booking_or_404(db, booking_id)
    if booking.status != BookingStatus.APROBADA or booking.event_date != club_today():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Booking is not active today",
        )
    guest_ops.mark_titular_entered(booking, utc_now())
    await db.commit()
    await db.refresh(booking)
    return booking
