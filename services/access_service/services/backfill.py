"""Full rebuild of the gate search index from the database."""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.common.logging import get_logger
from libs.common.search import AlgoliaSearchClient
from services.guests_service.models import DailyGuestList
from services.members_service.models import Member
from services.members_service.services.search_sync import guest_record, member_records

logger = get_logger(__name__)


async def rebuild_search_index(
    db: AsyncSession,
    search: AlgoliaSearchClient,
    today: date,
) -> dict[str, int]:
    """
    Clear the index and push every member plus guest lists from today on.

    Unlike the per-request syncs, failures here propagate to the caller.
    """
    members = (await db.execute(select(Member).order_by(Member.numero_socio))).scalars().all()
    members_by_id = {member.id: member for member in members}

    records = []
    for member in members:
        records.extend(member_records(member))

    guest_lists = (
        await db.execute(select(DailyGuestList).where(DailyGuestList.visit_date >= today))
    ).scalars().all()
    for guest_list in guest_lists:
        member = members_by_id.get(guest_list.member_id)
        if member is None:
            continue
        records.extend(
            guest_record(member, guest, guest_list.visit_date) for guest in guest_list.guests or []
        )

    await search.clear()
    await search.save_objects(records)
    logger.info(
        f"Search index rebuilt: {len(members)} members, "
        f"{len(guest_lists)} guest lists, {len(records)} records"
    )
    return {"members": len(members), "guest_lists": len(guest_lists), "records": len(records)}
