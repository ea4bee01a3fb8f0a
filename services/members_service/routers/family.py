"""Family group router: member batch submission and admin review."""

import uuid
from typing import List

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_member, require_admin
from libs.auth.models import Principal
from libs.common.container import get_search
from libs.common.datetime_utils import club_today, utc_now
from libs.common.search import AlgoliaSearchClient
from libs.db.session import get_async_db
from services.members_service.models import ApprovalState, Member
from services.members_service.schemas import (
    FamilyChangeSubmit,
    FamilyOverviewResponse,
    MemberResponse,
    PendingFamilyChangeResponse,
    RejectionPayload,
)
from services.members_service.services.family_changes import (
    acknowledge_rejection,
    approve_family_changes,
    overlay_family_changes,
    reject_family_changes,
    submit_family_changes,
)
from services.members_service.services.members import (
    build_member_response,
    get_member_or_404,
)
from services.members_service.services.search_sync import sync_member
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members/me", tags=["family"])
admin_router = APIRouter(prefix="/admin/family-changes", tags=["admin-family"])


def _overview(member: Member) -> FamilyOverviewResponse:
    return FamilyOverviewResponse(
        approved=member.family_members or [],
        pending=member.pending_family_changes,
        status=member.family_change_status,
        rejection_reason=member.family_change_rejection_reason,
        submitted_at=member.family_change_submitted_at,
        display=overlay_family_changes(member.family_members, member.pending_family_changes),
    )


@router.get("/family", response_model=FamilyOverviewResponse)
async def get_my_family(member: Member = Depends(get_current_member)):
    """Approved family group, the pending batch and the combined display view."""
    return _overview(member)


@router.post("/family-changes", response_model=FamilyOverviewResponse)
async def submit_my_family_changes(
    payload: FamilyChangeSubmit,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Submit the complete proposed family group for review."""
    submit_family_changes(member, payload.familiares, utc_now())
    await db.commit()
    await db.refresh(member)
    return _overview(member)


@router.post("/family-changes/acknowledge", response_model=FamilyOverviewResponse)
async def acknowledge_family_rejection(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Dismiss a rejected batch so a new one can be prepared."""
    acknowledge_rejection(member)
    await db.commit()
    await db.refresh(member)
    return _overview(member)


@admin_router.get("", response_model=List[PendingFamilyChangeResponse])
async def list_pending_family_changes(
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List members with a family change batch awaiting review."""
    result = await db.execute(
        select(Member)
        .where(Member.family_change_status == ApprovalState.PENDIENTE)
        .order_by(Member.family_change_submitted_at)
    )
    return [
        PendingFamilyChangeResponse(
            member_id=member.id,
            numero_socio=member.numero_socio,
            member_name=member.full_name,
            submitted_at=member.family_change_submitted_at,
            current=member.family_members or [],
            proposed=member.pending_family_changes or [],
        )
        for member in result.scalars().all()
    ]


@admin_router.post("/{member_id}/approve", response_model=MemberResponse)
async def approve_member_family_changes(
    member_id: uuid.UUID,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Approve the whole pending batch (admin only)."""
    member = await get_member_or_404(db, member_id)
    removed_dnis = approve_family_changes(member)
    await db.commit()
    await db.refresh(member)

    await sync_member(search, member, removed_dnis=removed_dnis)
    return build_member_response(member, club_today())


@admin_router.post("/{member_id}/reject", response_model=MemberResponse)
async def reject_member_family_changes(
    member_id: uuid.UUID,
    payload: RejectionPayload,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Reject the whole pending batch with a reason (admin only)."""
    member = await get_member_or_404(db, member_id)
    reject_family_changes(member, payload.reason)
    await db.commit()
    await db.refresh(member)
    return build_member_response(member, club_today())
