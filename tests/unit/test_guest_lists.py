"""Unit tests for daily guest lists and birthday bookings."""

from datetime import date, timedelta

import pytest
from fastapi import HTTPException
from services.guests_service.models import BookingStatus
from services.guests_service.schemas import (
    BirthdayBookingCreate,
    BirthdayBookingUpdate,
    GuestInput,
)
from services.guests_service.services import guest_lists as guest_ops
from services.members_service.models import MemberStatus
from tests.factories import BirthdayBookingFactory, DailyGuestListFactory, MemberFactory, guest_entry

TODAY = date(2026, 6, 10)


def _guest(dni: str, **overrides) -> GuestInput:
    data = {"nombre": "Invitado", "apellido": "Prueba", "dni": dni}
    data.update(overrides)
    return GuestInput(**data)


async def _member(db, **overrides):
    member = MemberFactory.create(**overrides)
    db.add(member)
    await db.commit()
    return member


# ---------------------------------------------------------------------------
# Daily guests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upsert_creates_list_for_visit_date(db_session):
    member = await _member(db_session)

    guest_list, removed = await guest_ops.upsert_daily_guests(
        db_session, member, [_guest("41000001"), _guest("41000002")], TODAY, 15
    )
    await db_session.commit()

    assert guest_list.visit_date == TODAY
    assert [g["dni"] for g in guest_list.guests] == ["41000001", "41000002"]
    assert removed == []
    assert all(g["ingresado"] is False for g in guest_list.guests)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upsert_enforces_guest_limit(db_session):
    member = await _member(db_session)
    guests = [_guest(str(41000000 + i)) for i in range(4)]

    with pytest.raises(HTTPException) as exc:
        await guest_ops.upsert_daily_guests(db_session, member, guests, TODAY, 3)

    assert exc.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_entered_guest_cannot_be_removed(db_session):
    member = await _member(db_session)
    entered = guest_entry(dni="41000001", ingresado=True, ingresado_at="2026-06-10T15:00:00+00:00")
    db_session.add(DailyGuestListFactory.create(member, visit_date=TODAY, guests=[entered]))
    await db_session.commit()

    with pytest.raises(HTTPException) as exc:
        await guest_ops.upsert_daily_guests(db_session, member, [_guest("41000002")], TODAY, 15)

    assert exc.value.status_code == 400
    assert "41000001" in exc.value.detail


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upsert_keeps_check_in_and_medical_fields(db_session):
    member = await _member(db_session)
    entered = guest_entry(dni="41000001", ingresado=True, registrado_por="gate-1")
    leaving = guest_entry(dni="41000003")
    db_session.add(
        DailyGuestListFactory.create(member, visit_date=TODAY, guests=[entered, leaving])
    )
    await db_session.commit()

    guest_list, removed = await guest_ops.upsert_daily_guests(
        db_session, member, [_guest("41000001"), _guest("41000002")], TODAY, 15
    )

    kept = guest_list.guests[0]
    assert kept["id"] == entered["id"]
    assert kept["ingresado"] is True
    assert kept["registrado_por"] == "gate-1"
    assert kept["apto_medico"] == entered["apto_medico"]
    assert removed == ["41000003"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_inactive_member_cannot_register_guests(db_session):
    member = await _member(db_session, estado_socio=MemberStatus.INACTIVO)

    with pytest.raises(HTTPException):
        await guest_ops.upsert_daily_guests(db_session, member, [_guest("41000001")], TODAY, 15)


# ---------------------------------------------------------------------------
# Birthday bookings
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_one_booking_per_year(db_session):
    member = await _member(db_session)
    await guest_ops.create_booking(
        db_session, member, BirthdayBookingCreate(event_date=date(2026, 8, 1)), TODAY, 50
    )
    await db_session.commit()

    with pytest.raises(HTTPException) as exc:
        await guest_ops.create_booking(
            db_session, member, BirthdayBookingCreate(event_date=date(2026, 9, 1)), TODAY, 50
        )

    assert exc.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancelled_booking_frees_the_year(db_session):
    member = await _member(db_session)
    db_session.add(
        BirthdayBookingFactory.create(
            member, event_date=date(2026, 8, 1), status=BookingStatus.CANCELADA
        )
    )
    await db_session.commit()

    booking = await guest_ops.create_booking(
        db_session, member, BirthdayBookingCreate(event_date=date(2026, 9, 1)), TODAY, 50
    )

    assert booking.year == 2026


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("event_date", [date(2026, 12, 25), date(2027, 1, 1), date(2026, 6, 9)])
async def test_restricted_or_past_dates_are_rejected(db_session, event_date):
    member = await _member(db_session)

    with pytest.raises(HTTPException) as exc:
        await guest_ops.create_booking(
            db_session, member, BirthdayBookingCreate(event_date=event_date), TODAY, 50
        )

    assert exc.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_booking_cannot_change_on_event_day(db_session):
    member = await _member(db_session)
    booking = BirthdayBookingFactory.create(member, event_date=TODAY)
    db_session.add(booking)
    await db_session.commit()

    with pytest.raises(HTTPException):
        await guest_ops.update_booking(
            db_session, booking, BirthdayBookingUpdate(guests=[]), TODAY, 50
        )
    with pytest.raises(HTTPException):
        guest_ops.cancel_booking(booking, TODAY)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_booking_moves_date_and_replaces_guests(db_session):
    member = await _member(db_session)
    booking = BirthdayBookingFactory.create(member, event_date=TODAY + timedelta(days=20))
    db_session.add(booking)
    await db_session.commit()

    await guest_ops.update_booking(
        db_session,
        booking,
        BirthdayBookingUpdate(event_date=TODAY + timedelta(days=21), guests=[_guest("42000001")]),
        TODAY,
        50,
    )

    assert booking.event_date == TODAY + timedelta(days=21)
    assert [g["dni"] for g in booking.guests] == ["42000001"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_pricing_row_is_created_on_first_read(db_session):
    pricing = await guest_ops.get_pricing(db_session)

    assert pricing.id == 1
    assert pricing.precio_invitado_diario == 0
