"""Photo-change request router."""

import uuid
from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from libs.auth.dependencies import get_current_member, require_admin
from libs.auth.models import Principal
from libs.common.config import get_settings
from libs.common.container import get_search, get_storage
from libs.common.datetime_utils import utc_now
from libs.common.search import AlgoliaSearchClient
from libs.common.storage import StorageService
from libs.db.session import get_async_db
from services.members_service.models import (
    Member,
    PersonType,
    PhotoChangeRequest,
    PhotoRequestStatus,
    PhotoSlot,
)
from services.members_service.schemas import (
    PhotoChangeRequestResponse,
    ReconcileResponse,
    RejectionPayload,
)
from services.members_service.services import photo_requests as photo_ops
from services.members_service.services.search_sync import sync_member
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

settings = get_settings()
router = APIRouter(prefix="/members/me/photo-requests", tags=["photo-requests"])
admin_router = APIRouter(prefix="/admin/photo-requests", tags=["admin-photo-requests"])


@router.post("", response_model=PhotoChangeRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_photo_request(
    file: UploadFile = File(...),
    slot: PhotoSlot = Form(...),
    person_type: PersonType = Form(PersonType.TITULAR),
    person_id: Optional[str] = Form(None),
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
    storage: StorageService = Depends(get_storage),
):
    """Propose a new photo. The current photo stays in place until approval."""
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="File must be an image")
    image_data = await file.read()
    if not image_data:
        raise HTTPException(status_code=400, detail="File is empty")

    return await photo_ops.submit_photo_request(
        db,
        storage,
        settings,
        member,
        person_type,
        person_id,
        slot,
        image_data,
        file.filename,
        utc_now(),
    )


@router.get("", response_model=List[PhotoChangeRequestResponse])
async def list_my_photo_requests(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(PhotoChangeRequest)
        .where(PhotoChangeRequest.member_id == member.id)
        .order_by(PhotoChangeRequest.requested_at.desc())
    )
    return result.scalars().all()


@admin_router.get("", response_model=List[PhotoChangeRequestResponse])
async def list_photo_requests(
    request_status: Optional[PhotoRequestStatus] = PhotoRequestStatus.PENDIENTE,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List photo change requests, pending ones by default (admin only)."""
    query = select(PhotoChangeRequest).order_by(PhotoChangeRequest.requested_at)
    if request_status is not None:
        query = query.where(PhotoChangeRequest.status == request_status)
    result = await db.execute(query)
    return result.scalars().all()


@admin_router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_photo_requests(
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    storage: StorageService = Depends(get_storage),
):
    """Remove permanent objects left behind by interrupted approvals."""
    examined, cleaned = await photo_ops.reconcile_photo_requests(
        db,
        storage,
        utc_now(),
        timedelta(minutes=settings.PHOTO_RECONCILE_GRACE_MINUTES),
    )
    return ReconcileResponse(examined=examined, cleaned=len(cleaned), request_ids=cleaned)


@admin_router.post("/{request_id}/approve", response_model=PhotoChangeRequestResponse)
async def approve_photo_request(
    request_id: uuid.UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    storage: StorageService = Depends(get_storage),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Approve: move the image to its permanent path and update the record."""
    photo_request = await photo_ops.approve_photo_request(
        db, storage, request_id, principal, utc_now()
    )
    if photo_request.slot == PhotoSlot.FOTO_PERFIL:
        member = await db.get(Member, photo_request.member_id)
        await sync_member(search, member)
    return photo_request


@admin_router.post("/{request_id}/reject", response_model=PhotoChangeRequestResponse)
async def reject_photo_request(
    request_id: uuid.UUID,
    payload: RejectionPayload,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Reject with a mandatory reason. Nothing else changes."""
    return await photo_ops.reject_photo_request(
        db, request_id, payload.reason, principal, utc_now()
    )
