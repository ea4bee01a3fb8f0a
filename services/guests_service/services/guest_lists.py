"""Daily guest lists, birthday bookings and guest pricing."""

import uuid
from datetime import date, datetime
from typing import Iterable, Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.common.logging import get_logger
from services.guests_service.models import (
    BirthdayBooking,
    BookingStatus,
    DailyGuestList,
    GuestPricing,
)
from services.guests_service.schemas import (
    BirthdayBookingCreate,
    BirthdayBookingUpdate,
    GuestInput,
    GuestPricingUpdate,
)
from services.members_service.models import Member, MemberStatus

logger = get_logger(__name__)

# (month, day) on which the club does not host birthday events
RESTRICTED_EVENT_DAYS = ((12, 25), (1, 1))
PRICING_ROW_ID = 1


def _require_active(member: Member) -> None:
    if member.estado_socio != MemberStatus.ACTIVO:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only active members can register guests",
        )


def _check_guest_count(guests: list, limit: int) -> None:
    if len(guests) > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A maximum of {limit} guests is allowed",
        )


def build_guest_entries(guests: Iterable[GuestInput], existing: list) -> tuple[list, list]:
    """
    Merge a submitted guest list with the stored one.

    Guests are matched by DNI. Check-in and medical fields of a kept guest are
    preserved. Guests that already entered cannot be dropped. Returns the new
    list and the DNIs that were removed.
    """
    previous = {guest.get("dni"): guest for guest in existing or []}
    submitted = {guest.dni for guest in guests}

    entered_missing = [
        dni for dni, guest in previous.items() if guest.get("ingresado") and dni not in submitted
    ]
    if entered_missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Guests who already entered cannot be removed: {', '.join(entered_missing)}",
        )

    entries = []
    for guest in guests:
        prior = previous.get(guest.dni, {})
        entries.append(
            {
                "id": prior.get("id") or uuid.uuid4().hex,
                "nombre": guest.nombre,
                "apellido": guest.apellido,
                "dni": guest.dni,
                "fecha_nacimiento": (
                    guest.fecha_nacimiento.isoformat()
                    if guest.fecha_nacimiento
                    else prior.get("fecha_nacimiento")
                ),
                "ingresado": prior.get("ingresado", False),
                "ingresado_at": prior.get("ingresado_at"),
                "registrado_por": prior.get("registrado_por"),
                "registrado_por_nombre": prior.get("registrado_por_nombre"),
                "apto_medico": prior.get("apto_medico"),
            }
        )

    removed = [dni for dni in previous if dni not in submitted]
    return entries, removed


# ============================================================================
# DAILY GUESTS
# ============================================================================


async def get_daily_list(
    db: AsyncSession,
    member_id: uuid.UUID,
    visit_date: date,
) -> Optional[DailyGuestList]:
    result = await db.execute(
        select(DailyGuestList).where(
            DailyGuestList.member_id == member_id,
            DailyGuestList.visit_date == visit_date,
        )
    )
    return result.scalar_one_or_none()


async def get_daily_list_or_404(db: AsyncSession, list_id: uuid.UUID) -> DailyGuestList:
    guest_list = await db.get(DailyGuestList, list_id)
    if not guest_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Guest list not found",
        )
    return guest_list


async def upsert_daily_guests(
    db: AsyncSession,
    member: Member,
    guests: list[GuestInput],
    visit_date: date,
    max_guests: int,
) -> tuple[DailyGuestList, list[str]]:
    """Replace the member's guest list for ``visit_date``. Caller commits."""
    _require_active(member)
    _check_guest_count(guests, max_guests)

    guest_list = await get_daily_list(db, member.id, visit_date)
    entries, removed = build_guest_entries(guests, guest_list.guests if guest_list else [])

    if guest_list is None:
        guest_list = DailyGuestList(
            member_id=member.id,
            member_name=member.full_name,
            numero_socio=member.numero_socio,
            visit_date=visit_date,
            guests=entries,
        )
        db.add(guest_list)
    else:
        guest_list.guests = entries

    logger.info(
        f"Daily guest list for {member.numero_socio} on {visit_date}: "
        f"{len(entries)} guests, {len(removed)} removed"
    )
    return guest_list, removed


def mark_titular_entered(holder, now: datetime) -> None:
    """Record that the host member arrived for a guest list or booking."""
    if holder.titular_ingresado:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Titular entry already recorded",
        )
    holder.titular_ingresado = True
    holder.titular_ingresado_at = now


# ============================================================================
# BIRTHDAY BOOKINGS
# ============================================================================


def validate_event_date(event_date: date, today: date) -> None:
    if event_date < today:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Event date cannot be in the past",
        )
    if (event_date.month, event_date.day) in RESTRICTED_EVENT_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Birthday events are not available on December 25 or January 1",
        )


async def _ensure_one_per_year(
    db: AsyncSession,
    member_id: uuid.UUID,
    year: int,
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    query = select(BirthdayBooking.id).where(
        BirthdayBooking.member_id == member_id,
        BirthdayBooking.year == year,
        BirthdayBooking.status != BookingStatus.CANCELADA,
    )
    if exclude_id is not None:
        query = query.where(BirthdayBooking.id != exclude_id)
    result = await db.execute(query)
    if result.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A birthday booking already exists for {year}",
        )


async def create_booking(
    db: AsyncSession,
    member: Member,
    payload: BirthdayBookingCreate,
    today: date,
    max_guests: int,
) -> BirthdayBooking:
    _require_active(member)
    validate_event_date(payload.event_date, today)
    _check_guest_count(payload.guests, max_guests)
    await _ensure_one_per_year(db, member.id, payload.event_date.year)

    entries, _ = build_guest_entries(payload.guests, [])
    booking = BirthdayBooking(
        member_id=member.id,
        member_name=member.full_name,
        numero_socio=member.numero_socio,
        event_date=payload.event_date,
        year=payload.event_date.year,
        guests=entries,
        status=BookingStatus.APROBADA,
    )
    db.add(booking)
    logger.info(f"Birthday booking created for {member.numero_socio} on {payload.event_date}")
    return booking


async def get_member_booking_or_404(
    db: AsyncSession,
    booking_id: uuid.UUID,
    member: Member,
) -> BirthdayBooking:
    booking = await db.get(BirthdayBooking, booking_id)
    if not booking or booking.member_id != member.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Birthday booking not found",
        )
    return booking


async def get_booking_or_404(db: AsyncSession, booking_id: uuid.UUID) -> BirthdayBooking:
    booking = await db.get(BirthdayBooking, booking_id)
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Birthday booking not found",
        )
    return booking


def _ensure_modifiable(booking: BirthdayBooking, today: date) -> None:
    if booking.status == BookingStatus.CANCELADA:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Booking is cancelled",
        )
    if booking.event_date <= today:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Bookings can only be changed before the event date",
        )


async def update_booking(
    db: AsyncSession,
    booking: BirthdayBooking,
    payload: BirthdayBookingUpdate,
    today: date,
    max_guests: int,
) -> BirthdayBooking:
    _ensure_modifiable(booking, today)

    if payload.event_date is not None and payload.event_date != booking.event_date:
        validate_event_date(payload.event_date, today)
        if payload.event_date.year != booking.year:
            await _ensure_one_per_year(
                db, booking.member_id, payload.event_date.year, exclude_id=booking.id
            )
        booking.event_date = payload.event_date
        booking.year = payload.event_date.year

    if payload.guests is not None:
        _check_guest_count(payload.guests, max_guests)
        entries, _ = build_guest_entries(payload.guests, booking.guests)
        booking.guests = entries

    return booking


def cancel_booking(booking: BirthdayBooking, today: date) -> BirthdayBooking:
    _ensure_modifiable(booking, today)
    booking.status = BookingStatus.CANCELADA
    logger.info(f"Birthday booking {booking.id} cancelled")
    return booking


# ============================================================================
# PRICING
# ============================================================================


async def get_pricing(db: AsyncSession) -> GuestPricing:
    pricing = await db.get(GuestPricing, PRICING_ROW_ID)
    if pricing is None:
        pricing = GuestPricing(
            id=PRICING_ROW_ID,
            precio_invitado_diario=0,
            precio_invitado_cumpleanos=0,
        )
        db.add(pricing)
        await db.flush()
    return pricing


async def update_pricing(
    db: AsyncSession,
    payload: GuestPricingUpdate,
    updated_by: str,
) -> GuestPricing:
    pricing = await get_pricing(db)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(pricing, field, value)
    pricing.updated_by = updated_by
    return pricing
