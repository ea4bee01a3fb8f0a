"""Integration tests for the gate access service."""

from datetime import timedelta

import pytest
from libs.common.datetime_utils import club_today
from services.members_service.models import MemberStatus
from services.members_service.services.search_sync import guest_record, member_records, titular_record
from tests.conftest import make_member_user, make_staff_user, override_auth
from tests.factories import (
    AdherentFactory,
    BirthdayBookingFactory,
    DailyGuestListFactory,
    FamilyMemberFactory,
    MemberFactory,
    guest_entry,
)


def _index(search_index, records):
    for record in records:
        search_index.records[record["objectID"]] = record


# ---------------------------------------------------------------------------
# Search and lookup
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_blank_search_returns_no_hits(access_client, db_session, search_index):
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post("/access/search", json={"query": "   "})

    assert response.status_code == 200
    assert response.json()["hits"] == []
    assert search_index.queries == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_search_is_accent_insensitive(access_client, db_session, search_index):
    member = MemberFactory.create(nombre="José", apellido="Núñez")
    db_session.add(member)
    _index(search_index, [titular_record(member)])
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post("/access/search", json={"query": "JOSE NUNEZ"})

    hits = response.json()["hits"]
    assert response.json()["query"] == "jose nunez"
    assert len(hits) == 1
    assert hits[0]["person_type"] == "titular"
    assert hits[0]["numero_socio"] == member.numero_socio


@pytest.mark.asyncio
@pytest.mark.integration
async def test_socio_cannot_use_the_gate(access_client, db_session):
    from services.access_service.app.main import app

    with override_auth(app, make_member_user()):
        response = await access_client.post("/access/search", json={"query": "x"})

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_lookup_titular_returns_group(access_client, db_session, search_index):
    member = MemberFactory.create(
        dni="31000001",
        family_members=[FamilyMemberFactory.create()],
        adherentes=[AdherentFactory.create()],
    )
    db_session.add(member)
    await db_session.commit()
    _index(search_index, member_records(member))
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post("/access/lookup", json={"query": "31000001"})

    data = response.json()
    assert response.status_code == 200, response.text
    assert data["found"] is True
    assert data["person"]["allowed"] is True
    assert data["person"]["medical"]["status"] == "valido"
    assert [p["person_type"] for p in data["group"]] == ["titular", "familiar", "adherente"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_lookup_without_hits_is_not_found(access_client, db_session):
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post("/access/lookup", json={"query": "99999999"})

    assert response.json() == {"found": False, "person": None, "group": []}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_lookup_stale_hit_is_not_found(access_client, db_session, search_index):
    # Indexed but never stored: the database is authoritative.
    ghost = MemberFactory.create(dni="31000002")
    _index(search_index, [titular_record(ghost)])
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post("/access/lookup", json={"query": "31000002"})

    assert response.json()["found"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_lookup_inactive_titular_is_denied(access_client, db_session, search_index):
    member = MemberFactory.create(dni="31000003", estado_socio=MemberStatus.INACTIVO)
    db_session.add(member)
    await db_session.commit()
    _index(search_index, [titular_record(member)])
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post("/access/lookup", json={"query": "31000003"})

    person = response.json()["person"]
    assert person["allowed"] is False
    assert any("inactivo" in reason for reason in person["reasons"])


@pytest.mark.asyncio
@pytest.mark.integration
async def test_lookup_daily_guest(access_client, db_session, search_index):
    member = MemberFactory.create()
    guest = guest_entry(dni="32000001")
    guest_list = DailyGuestListFactory.create(member, guests=[guest])
    db_session.add_all([member, guest_list])
    await db_session.commit()
    _index(search_index, [guest_record(member, guest, club_today())])
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post("/access/lookup", json={"query": "32000001"})

    data = response.json()
    assert data["found"] is True
    assert data["person"]["person_type"] == "invitado_diario"
    assert data["person"]["visit_date"] == club_today().isoformat()
    assert data["group"] == []


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_entry_creates_log_and_counts(access_client, db_session):
    member = MemberFactory.create()
    db_session.add(member)
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        entry = await access_client.post(
            "/access/entries", json={"person_type": "titular", "member_id": str(member.id)}
        )
        exit_ = await access_client.post(
            "/access/entries",
            json={"person_type": "titular", "member_id": str(member.id), "direction": "salida"},
        )
        logs = await access_client.get("/access/logs")
        stats = await access_client.get("/access/stats")

    assert entry.status_code == 201, entry.text
    assert entry.json()["recorded_by"] == gate.user_id
    assert exit_.status_code == 201
    assert [log["direction"] for log in logs.json()] == ["salida", "entrada"]
    assert stats.json()["total"] == 1
    assert stats.json()["breakdown"]["titular"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_entry_refused_when_medical_expired(access_client, db_session):
    expired = {"valido": True, "fecha_vencimiento": (club_today() - timedelta(days=1)).isoformat()}
    member = MemberFactory.create(apto_medico=expired)
    db_session.add(member)
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post(
            "/access/entries", json={"person_type": "titular", "member_id": str(member.id)}
        )
        stats = await access_client.get("/access/stats")

    assert response.status_code == 400
    assert "Apto" in response.json()["detail"]
    assert stats.json()["total"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_guest_enters_only_once(access_client, db_session):
    member = MemberFactory.create()
    guest = guest_entry(dni="32000002")
    db_session.add_all([member, DailyGuestListFactory.create(member, guests=[guest])])
    gate = await make_staff_user(db_session, role="portero")

    payload = {"person_type": "invitado_diario", "member_id": str(member.id), "dni": "32000002"}

    from services.access_service.app.main import app

    with override_auth(app, gate):
        first = await access_client.post("/access/entries", json=payload)
        second = await access_client.post("/access/entries", json=payload)

    assert first.status_code == 201, first.text
    assert second.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_birthday_guest_entry_needs_no_medical(access_client, db_session):
    member = MemberFactory.create()
    booking = BirthdayBookingFactory.create(
        member, event_date=club_today(), guests=[guest_entry(dni="32000003", apto_medico=None)]
    )
    db_session.add_all([member, booking])
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post(
            "/access/entries",
            json={
                "person_type": "invitado_cumpleanos",
                "member_id": str(member.id),
                "dni": "32000003",
                "booking_id": str(booking.id),
            },
        )

    assert response.status_code == 201, response.text
    assert booking.guests[0]["ingresado"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_entry_for_unknown_person_is_404(access_client, db_session):
    member = MemberFactory.create()
    db_session.add(member)
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post(
            "/access/entries",
            json={"person_type": "familiar", "member_id": str(member.id), "dni": "12345678"},
        )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_entry_requires_dni_for_non_titular(access_client, db_session):
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.post(
            "/access/entries",
            json={"person_type": "adherente", "member_id": str(MemberFactory.create().id)},
        )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stats_for_quiet_day_are_zero(access_client, db_session):
    gate = await make_staff_user(db_session, role="medico")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        response = await access_client.get(
            "/access/stats", params={"stats_date": "2020-01-01"}
        )

    assert response.json()["total"] == 0
    assert set(response.json()["breakdown"]) >= {"titular", "invitado_diario"}


# ---------------------------------------------------------------------------
# Backfill
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_backfill_rebuilds_index(access_client, db_session, search_index):
    member = MemberFactory.create(family_members=[FamilyMemberFactory.create()])
    db_session.add_all([member, DailyGuestListFactory.create(member)])
    search_index.records["stale"] = {"objectID": "stale"}
    admin = await make_staff_user(db_session)
    gate = await make_staff_user(db_session, role="portero")

    from services.access_service.app.main import app

    with override_auth(app, gate):
        denied = await access_client.post("/access/search/backfill")
    with override_auth(app, admin):
        response = await access_client.post("/access/search/backfill")

    assert denied.status_code == 403
    assert response.json() == {"members": 1, "guest_lists": 1, "records": 3}
    assert "stale" not in search_index.records
    assert str(member.id) in search_index.records
