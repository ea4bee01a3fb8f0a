"""Admin members router: member management and the dashboard."""

import uuid
from datetime import timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import require_admin
from libs.auth.models import Principal
from libs.common.container import get_search
from libs.common.datetime_utils import club_today
from libs.common.logging import get_logger
from libs.common.search import AlgoliaSearchClient
from libs.db.session import get_async_db
from services.access_service.models import DailyEntryStats
from services.guests_service.models import BirthdayBooking, BookingStatus, DailyGuestList
from services.members_service.models import (
    ApprovalState,
    Member,
    MemberStatus,
    PhotoChangeRequest,
    PhotoRequestStatus,
)
from services.members_service.schemas import (
    AdminMemberCreate,
    AdminMemberUpdate,
    DashboardResponse,
    MemberResponse,
    MemberStatusUpdate,
    MemberSummary,
)
from services.members_service.services.adherents import pending_adherents
from services.members_service.services.medical import derive_medical_status
from services.members_service.services.members import (
    build_member_response,
    get_member_or_404,
    register_member,
)
from services.members_service.services.search_sync import sync_member
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin-members"])
logger = get_logger(__name__)


@router.get("/members", response_model=List[MemberSummary])
async def list_members(
    estado: Optional[MemberStatus] = None,
    q: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List members, optionally filtered by status and a name/DNI/number search."""
    query = select(Member).order_by(Member.numero_socio).offset(skip).limit(limit)
    if estado is not None:
        query = query.where(Member.estado_socio == estado)
    if q:
        pattern = f"%{q.strip()}%"
        query = query.where(
            or_(
                Member.nombre.ilike(pattern),
                Member.apellido.ilike(pattern),
                Member.dni.ilike(pattern),
                Member.numero_socio.ilike(pattern),
            )
        )
    result = await db.execute(query)
    return result.scalars().all()


@router.post(
    "/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED
)
async def create_member(
    member_in: AdminMemberCreate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Register a member at the front desk, without a login."""
    today = club_today()
    member = await register_member(db, member_in, principal.user_id, today)
    await sync_member(search, member)
    return build_member_response(member, today)


@router.get("/members/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: uuid.UUID,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    member = await get_member_or_404(db, member_id)
    return build_member_response(member, club_today())


@router.patch("/members/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: uuid.UUID,
    member_in: AdminMemberUpdate,
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Edit a member's profile fields (admin only)."""
    member = await get_member_or_404(db, member_id)
    updates = member_in.model_dump(exclude_unset=True)

    if "dni" in updates and updates["dni"] != member.dni:
        clash = await db.execute(select(Member.id).where(Member.dni == updates["dni"]))
        if clash.first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A member with this DNI already exists",
            )

    for field, value in updates.items():
        setattr(member, field, value)
    await db.commit()
    await db.refresh(member)

    await sync_member(search, member)
    return build_member_response(member, club_today())


@router.patch("/members/{member_id}/status", response_model=MemberResponse)
async def update_member_status(
    member_id: uuid.UUID,
    payload: MemberStatusUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Activate, deactivate or send a member back to validation."""
    member = await get_member_or_404(db, member_id)
    if member.estado_socio == payload.estado_socio:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Member is already {member.estado_socio.value}",
        )

    member.estado_socio = payload.estado_socio
    await db.commit()
    await db.refresh(member)
    logger.info(
        f"Member {member.numero_socio} set to {member.estado_socio.value} by {principal.user_id}"
    )

    await sync_member(search, member)
    return build_member_response(member, club_today())


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    _: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Counts for the admin landing page."""
    today = club_today()

    status_rows = await db.execute(
        select(Member.estado_socio, func.count(Member.id)).group_by(Member.estado_socio)
    )
    members_by_status = {s.value: 0 for s in MemberStatus}
    for estado, count in status_rows.all():
        members_by_status[estado.value] = count

    pending_photos = await db.scalar(
        select(func.count(PhotoChangeRequest.id)).where(
            PhotoChangeRequest.status == PhotoRequestStatus.PENDIENTE
        )
    )
    pending_family = await db.scalar(
        select(func.count(Member.id)).where(
            Member.family_change_status == ApprovalState.PENDIENTE
        )
    )

    members = (await db.execute(select(Member))).scalars().all()
    pending_adherent_count = sum(len(pending_adherents(m)) for m in members)
    expiring_soon = sum(
        1
        for m in members
        if derive_medical_status(m.apto_medico, m.fecha_nacimiento, today).expiring_soon
    )

    stats = await db.get(DailyEntryStats, today)

    guest_lists = await db.execute(
        select(DailyGuestList.guests).where(DailyGuestList.visit_date == today)
    )
    daily_guests = sum(len(guests or []) for guests in guest_lists.scalars().all())

    upcoming_bookings = await db.scalar(
        select(func.count(BirthdayBooking.id)).where(
            BirthdayBooking.status == BookingStatus.APROBADA,
            BirthdayBooking.event_date >= today,
            BirthdayBooking.event_date <= today + timedelta(days=7),
        )
    )

    return DashboardResponse(
        members_by_status=members_by_status,
        total_members=sum(members_by_status.values()),
        pending_photo_requests=pending_photos or 0,
        pending_family_changes=pending_family or 0,
        pending_adherent_requests=pending_adherent_count,
        medical_expiring_soon=expiring_soon,
        entries_today=stats.total if stats else 0,
        entries_today_by_type=stats.breakdown if stats else {},
        daily_guests_today=daily_guests,
        upcoming_birthday_bookings=upcoming_bookings or 0,
    )
