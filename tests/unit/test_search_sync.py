"""Unit tests for search records and the Algolia client."""

from datetime import date

import pytest
from libs.common.error_handler import DownstreamServiceError
from libs.common.search import AlgoliaSearchClient
from services.members_service.services.search_sync import (
    TYPE_ADHERENTE,
    TYPE_FAMILIAR,
    TYPE_TITULAR,
    guest_object_id,
    member_records,
    sync_daily_guests,
    sync_member,
)
from tests.factories import AdherentFactory, FamilyMemberFactory, MemberFactory, guest_entry
from tests.stubs import FakeAlgoliaIndex


@pytest.mark.unit
def test_member_records_cover_approved_people_only():
    child = FamilyMemberFactory.create()
    draft = FamilyMemberFactory.create(estado_validacion="pendiente")
    adherent = AdherentFactory.create()
    pending_adherent = AdherentFactory.create(estado_solicitud="pendiente")
    member = MemberFactory.create(
        family_members=[child, draft], adherentes=[adherent, pending_adherent]
    )

    records = member_records(member)

    assert [r["tipo"] for r in records] == [TYPE_TITULAR, TYPE_FAMILIAR, TYPE_ADHERENTE]
    assert records[0]["objectID"] == str(member.id)
    assert records[1]["objectID"] == f"{member.id}-{child['dni']}"
    assert records[2]["socioTitularId"] == str(member.id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sync_member_saves_and_drops_removed_people():
    index = FakeAlgoliaIndex()
    member = MemberFactory.create()
    index.records[f"{member.id}-40000009"] = {"objectID": f"{member.id}-40000009"}

    await sync_member(index.client(), member, removed_dnis=["40000009"])

    assert str(member.id) in index.records
    assert f"{member.id}-40000009" not in index.records


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sync_member_swallows_index_outage():
    """Index writes follow a committed change and must not fail the request."""
    index = FakeAlgoliaIndex()
    index.unavailable = True

    await sync_member(index.client(), MemberFactory.create())

    assert index.records == {}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sync_daily_guests_uses_dated_object_ids():
    index = FakeAlgoliaIndex()
    member = MemberFactory.create()
    guest = guest_entry()
    visit = date(2026, 6, 10)

    await sync_daily_guests(index.client(), member, visit, [guest], removed_dnis=["41111111"])

    record = index.records[guest_object_id(member.id, guest["dni"], visit)]
    assert record["fechaVisita"] == "2026-06-10"
    assert record["socioTitularId"] == str(member.id)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_search_without_credentials_raises():
    client = AlgoliaSearchClient(app_id="", api_key="", index_name="socios")

    with pytest.raises(DownstreamServiceError):
        await client.search("perez")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_search_error_status_raises():
    index = FakeAlgoliaIndex()
    index.unavailable = True

    with pytest.raises(DownstreamServiceError) as exc:
        await index.client().search("perez")

    assert exc.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.unit
async def test_save_objects_batches_large_payloads():
    index = FakeAlgoliaIndex()
    records = [{"objectID": str(i), "dni": str(i)} for i in range(1200)]

    await index.client().save_objects(records)

    assert len(index.records) == 1200
