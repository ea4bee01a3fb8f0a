"""Adherents router: member proposals and admin decisions."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_member, require_admin
from libs.auth.models import Principal
from libs.common.container import get_search
from libs.common.datetime_utils import club_today, utc_now
from libs.common.search import AlgoliaSearchClient
from libs.db.session import get_async_db
from services.members_service.models import Member
from services.members_service.schemas import (
    AdherentCreate,
    EmbeddedPersonResponse,
    PendingAdherentResponse,
    RejectionPayload,
)
from services.members_service.services import adherents as adherent_ops
from services.members_service.services.members import (
    build_member_response,
    get_member_or_404,
)
from services.members_service.services.search_sync import sync_member
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members/me/adherents", tags=["adherents"])
admin_router = APIRouter(prefix="/admin/adherents", tags=["admin-adherents"])


def _serialize(member: Member) -> list:
    return build_member_response(member, club_today()).adherentes


@router.get("", response_model=List[EmbeddedPersonResponse])
async def list_my_adherents(member: Member = Depends(get_current_member)):
    return _serialize(member)


@router.post("", response_model=EmbeddedPersonResponse, status_code=status.HTTP_201_CREATED)
async def add_my_adherent(
    payload: AdherentCreate,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Propose a new adherent. It stays inactive until an admin approves it."""
    adherent = adherent_ops.add_adherent(member, payload, utc_now())
    await db.commit()
    return adherent


@router.delete("/{adherent_id}", response_model=List[EmbeddedPersonResponse])
async def request_my_adherent_removal(
    adherent_id: str,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Request removal of an approved adherent, or withdraw a pending proposal."""
    adherent_ops.request_adherent_deletion(member, adherent_id)
    await db.commit()
    await db.refresh(member)
    return _serialize(member)


@admin_router.get("/pending", response_model=List[PendingAdherentResponse])
async def list_pending_adherents(
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Adherent additions and removals awaiting review across all members."""
    result = await db.execute(select(Member).order_by(Member.numero_socio))
    pending = []
    for member in result.scalars().all():
        for adherent in adherent_ops.pending_adherents(member):
            pending.append(
                PendingAdherentResponse(
                    member_id=member.id,
                    numero_socio=member.numero_socio,
                    member_name=member.full_name,
                    adherent=adherent,
                )
            )
    return pending


async def _decide(db, search, member_id, adherent_id, operation, *args, removed=False):
    member = await get_member_or_404(db, member_id)
    adherent = operation(member, adherent_id, *args)
    await db.commit()
    await db.refresh(member)
    await sync_member(search, member, removed_dnis=[adherent.get("dni")] if removed else ())
    return _serialize(member)


@admin_router.post("/{member_id}/{adherent_id}/approve", response_model=List[EmbeddedPersonResponse])
async def approve_adherent(
    member_id: uuid.UUID,
    adherent_id: str,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    return await _decide(db, search, member_id, adherent_id, adherent_ops.approve_adherent)


@admin_router.post("/{member_id}/{adherent_id}/reject", response_model=List[EmbeddedPersonResponse])
async def reject_adherent(
    member_id: uuid.UUID,
    adherent_id: str,
    payload: RejectionPayload,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    return await _decide(
        db, search, member_id, adherent_id, adherent_ops.reject_adherent, payload.reason
    )


@admin_router.post(
    "/{member_id}/{adherent_id}/approve-deletion", response_model=List[EmbeddedPersonResponse]
)
async def approve_adherent_deletion(
    member_id: uuid.UUID,
    adherent_id: str,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    return await _decide(
        db,
        search,
        member_id,
        adherent_id,
        adherent_ops.approve_adherent_deletion,
        removed=True,
    )


@admin_router.post(
    "/{member_id}/{adherent_id}/reject-deletion", response_model=List[EmbeddedPersonResponse]
)
async def reject_adherent_deletion(
    member_id: uuid.UUID,
    adherent_id: str,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    return await _decide(
        db, search, member_id, adherent_id, adherent_ops.reject_adherent_deletion
    )
