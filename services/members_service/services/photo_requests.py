"""Photo-change requests.

An unreviewed image never becomes authoritative: members upload to a
temporary location and an admin decides.

Approval runs in two phases:

1. Stage: copy the temporary image to its permanent path and record
   ``staged_path`` on the request.
2. Commit: patch the target photo field and mark the request approved in a
   single database transaction.

If phase 2 fails the staged object is deleted and the request stays
pending, so approving again is always safe. A crash between the phases
leaves a staged object behind; ``reconcile_photo_requests`` removes those
once they are older than the grace period.
"""

import copy
import re
import uuid
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import Principal
from libs.common.config import Settings
from libs.common.error_handler import DownstreamServiceError
from libs.common.image_utils import compress_for_upload
from libs.common.logging import get_logger
from libs.common.storage import StorageService
from libs.common.text_utils import full_name
from services.members_service.models import (
    Member,
    PersonType,
    PhotoChangeRequest,
    PhotoRequestStatus,
    PhotoSlot,
)
from services.members_service.services.members import find_embedded

logger = get_logger(__name__)

TEMP_PREFIX = "solicitudes-temp"
PERMANENT_PREFIX = "socios"
PHOTO_PERSON_TYPES = (PersonType.TITULAR, PersonType.FAMILIAR, PersonType.ADHERENTE)
EMBEDDED_FOLDERS = {
    PersonType.FAMILIAR: "familiares",
    PersonType.ADHERENTE: "adherentes",
}

_unsafe_chars = re.compile(r"[^A-Za-z0-9._-]+")


def temp_path_for(member_id, filename: str, now: datetime) -> str:
    safe_name = _unsafe_chars.sub("_", filename or "foto.jpg").strip("_") or "foto.jpg"
    return f"{TEMP_PREFIX}/{member_id}/{int(now.timestamp() * 1000)}_{safe_name}"


def permanent_path_for(
    member_id,
    person_type: PersonType,
    person_id: Optional[str],
    slot: PhotoSlot,
    token: str,
) -> str:
    """Permanent location of an approved photo.

    ``token`` is derived from the request id, so each approval gets a new URL
    and re-running an approval reuses the same path.
    """
    if person_type == PersonType.TITULAR:
        return f"{PERMANENT_PREFIX}/{member_id}/{slot.value}_{token}.jpg"
    folder = EMBEDDED_FOLDERS[person_type]
    return f"{PERMANENT_PREFIX}/{member_id}/{folder}/{person_id}_{slot.value}_{token}.jpg"


def _people(member: Member, person_type: PersonType) -> list:
    if person_type == PersonType.FAMILIAR:
        return member.family_members or []
    return member.adherentes or []


def resolve_target(
    member: Member, person_type: PersonType, person_id: Optional[str]
) -> tuple[str, dict]:
    """Return (display name, current photo fields) of the target person, 404 if unknown."""
    if person_type == PersonType.TITULAR:
        photos = {slot.value: getattr(member, slot.value) for slot in PhotoSlot}
        return member.full_name, photos

    if person_type not in EMBEDDED_FOLDERS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Photos cannot be requested for {person_type.value}",
        )
    person = find_embedded(_people(member, person_type), person_id)
    if person is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{person_type.value.capitalize()} not found",
        )
    return full_name(person.get("nombre"), person.get("apellido")), person


def apply_photo(
    member: Member,
    person_type: PersonType,
    person_id: Optional[str],
    slot: PhotoSlot,
    url: str,
) -> None:
    """Patch exactly one photo field, plus the legacy alias for profile photos."""
    if person_type == PersonType.TITULAR:
        setattr(member, slot.value, url)
        if slot == PhotoSlot.FOTO_PERFIL:
            member.foto_url = url
        return

    people = copy.deepcopy(_people(member, person_type))
    person = find_embedded(people, person_id)
    if person is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The person this request targets no longer exists",
        )
    person[slot.value] = url
    if slot == PhotoSlot.FOTO_PERFIL:
        person["foto_url"] = url

    if person_type == PersonType.FAMILIAR:
        member.family_members = people
    else:
        member.adherentes = people


async def get_request_or_404(db: AsyncSession, request_id) -> PhotoChangeRequest:
    result = await db.execute(
        select(PhotoChangeRequest).where(PhotoChangeRequest.id == request_id)
    )
    photo_request = result.scalar_one_or_none()
    if not photo_request:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Photo change request not found",
        )
    return photo_request


def _ensure_pending(photo_request: PhotoChangeRequest) -> None:
    if photo_request.is_decided:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Request is already {photo_request.status.value}",
        )


async def submit_photo_request(
    db: AsyncSession,
    storage: StorageService,
    settings: Settings,
    member: Member,
    person_type: PersonType,
    person_id: Optional[str],
    slot: PhotoSlot,
    image_data: bytes,
    filename: str,
    now: datetime,
) -> PhotoChangeRequest:
    if person_type not in PHOTO_PERSON_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Photos cannot be requested for {person_type.value}",
        )
    if person_type == PersonType.TITULAR:
        person_id = None
    person_name, current_photos = resolve_target(member, person_type, person_id)

    duplicate = await db.execute(
        select(PhotoChangeRequest.id).where(
            PhotoChangeRequest.member_id == member.id,
            PhotoChangeRequest.person_type == person_type,
            PhotoChangeRequest.person_id == person_id
            if person_id is not None
            else PhotoChangeRequest.person_id.is_(None),
            PhotoChangeRequest.slot == slot,
            PhotoChangeRequest.status == PhotoRequestStatus.PENDIENTE,
        )
    )
    if duplicate.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="There is already a pending request for this photo",
        )

    image_data = await compress_for_upload(image_data, settings)
    temp_path = temp_path_for(member.id, filename, now)
    temp_url = await storage.put(temp_path, image_data)

    photo_request = PhotoChangeRequest(
        member_id=member.id,
        member_name=member.full_name,
        numero_socio=member.numero_socio,
        person_type=person_type,
        person_id=person_id,
        person_name=person_name,
        slot=slot,
        current_url=current_photos.get(slot.value),
        new_url=temp_url,
        temp_path=temp_path,
        status=PhotoRequestStatus.PENDIENTE,
        requested_at=now,
    )
    db.add(photo_request)
    await db.commit()
    await db.refresh(photo_request)
    logger.info(
        f"Photo request {photo_request.id} submitted for {slot.value} of {person_name}"
    )
    return photo_request


async def _stage(
    db: AsyncSession,
    storage: StorageService,
    photo_request: PhotoChangeRequest,
    now: datetime,
) -> str:
    """Phase 1: copy the temporary image to its permanent path."""
    if photo_request.staged_path and await storage.exists(photo_request.staged_path):
        logger.info(f"Photo request {photo_request.id} resumes from staged object")
        return photo_request.staged_path

    staged_path = permanent_path_for(
        photo_request.member_id,
        photo_request.person_type,
        photo_request.person_id,
        photo_request.slot,
        token=photo_request.id.hex[:12],
    )
    await storage.copy(photo_request.temp_path, staged_path)

    photo_request.staged_path = staged_path
    photo_request.staged_at = now
    await db.commit()
    return staged_path


async def _compensate(
    db: AsyncSession,
    storage: StorageService,
    photo_request: PhotoChangeRequest,
    staged_path: str,
) -> None:
    """Undo phase 1 after a failed phase 2. Leftovers go to reconciliation."""
    try:
        await storage.delete(staged_path)
    except DownstreamServiceError as e:
        logger.warning(f"Could not delete staged photo {staged_path}, left for reconciliation: {e}")
        return
    photo_request.staged_path = None
    photo_request.staged_at = None
    await db.commit()


async def approve_photo_request(
    db: AsyncSession,
    storage: StorageService,
    request_id,
    decided_by: Principal,
    now: datetime,
) -> PhotoChangeRequest:
    photo_request = await get_request_or_404(db, request_id)
    _ensure_pending(photo_request)

    member = await db.get(Member, photo_request.member_id)
    if member is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found",
        )
    resolve_target(member, photo_request.person_type, photo_request.person_id)

    staged_path = await _stage(db, storage, photo_request, now)
    approved_url = storage.url_for(staged_path)

    try:
        apply_photo(
            member,
            photo_request.person_type,
            photo_request.person_id,
            photo_request.slot,
            approved_url,
        )
        photo_request.status = PhotoRequestStatus.APROBADA
        photo_request.approved_url = approved_url
        photo_request.decided_by = decided_by.user_id
        photo_request.decided_at = now
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception(f"Photo request {request_id} failed after staging, compensating")
        photo_request = await get_request_or_404(db, request_id)
        await _compensate(db, storage, photo_request, staged_path)
        raise

    await db.refresh(photo_request)
    logger.info(f"Photo request {photo_request.id} approved by {decided_by.user_id}")
    return photo_request


async def reject_photo_request(
    db: AsyncSession,
    request_id,
    reason: str,
    decided_by: Principal,
    now: datetime,
) -> PhotoChangeRequest:
    photo_request = await get_request_or_404(db, request_id)
    _ensure_pending(photo_request)
    if not reason or not reason.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A rejection reason is required",
        )

    photo_request.status = PhotoRequestStatus.RECHAZADA
    photo_request.rejection_reason = reason.strip()
    photo_request.decided_by = decided_by.user_id
    photo_request.decided_at = now
    await db.commit()
    await db.refresh(photo_request)
    logger.info(f"Photo request {photo_request.id} rejected by {decided_by.user_id}")
    return photo_request


async def reconcile_photo_requests(
    db: AsyncSession,
    storage: StorageService,
    now: datetime,
    grace: timedelta,
) -> tuple[int, list[uuid.UUID]]:
    """
    Delete permanent objects staged by approvals that never committed.

    Returns (requests examined, ids of requests cleaned).
    """
    result = await db.execute(
        select(PhotoChangeRequest).where(
            PhotoChangeRequest.status == PhotoRequestStatus.PENDIENTE,
            PhotoChangeRequest.staged_path.is_not(None),
            PhotoChangeRequest.staged_at < now - grace,
        )
    )
    stale = result.scalars().all()

    cleaned = []
    for photo_request in stale:
        try:
            await storage.delete(photo_request.staged_path)
        except DownstreamServiceError as e:
            logger.warning(f"Reconcile could not delete {photo_request.staged_path}: {e}")
            continue
        photo_request.staged_path = None
        photo_request.staged_at = None
        cleaned.append(photo_request.id)

    await db.commit()
    logger.info(f"Photo reconciliation examined {len(stale)}, cleaned {len(cleaned)}")
    return len(stale), cleaned
