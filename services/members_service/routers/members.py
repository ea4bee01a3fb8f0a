"""Member self-service router: signup completion and own profile."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_member, get_current_user
from libs.auth.models import AuthUser
from libs.common.container import get_search
from libs.common.datetime_utils import club_today
from libs.common.logging import get_logger
from libs.common.search import AlgoliaSearchClient
from libs.db.session import get_async_db
from services.members_service.models import Member, MemberStatus
from services.members_service.schemas import MemberCreate, MemberResponse, MemberUpdate
from services.members_service.services.members import (
    build_member_response,
    complete_signup,
)
from services.members_service.services.search_sync import sync_member
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/members", tags=["members"])


@router.post("/", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    member_in: MemberCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Complete signup once the identity documents were uploaded."""
    today = club_today()
    member = await complete_signup(db, current_user.user_id, member_in, today)
    await sync_member(search, member)
    return build_member_response(member, today)


@router.get("/me", response_model=MemberResponse)
async def get_current_member_profile(
    member: Member = Depends(get_current_member),
):
    """Get the profile of the currently authenticated member."""
    return build_member_response(member, club_today())


@router.patch("/me", response_model=MemberResponse)
async def update_current_member(
    member_in: MemberUpdate,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
):
    """Update own contact details."""
    for field, value in member_in.model_dump(exclude_unset=True).items():
        setattr(member, field, value)

    await db.commit()
    await db.refresh(member)
    return build_member_response(member, club_today())


@router.post("/me/deactivate", response_model=MemberResponse)
async def deactivate_current_member(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Deactivate own account. Records are never deleted."""
    if member.estado_socio == MemberStatus.INACTIVO:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Account is already inactive",
        )
    member.estado_socio = MemberStatus.INACTIVO
    await db.commit()
    await db.refresh(member)
    logger.info(f"Member {member.numero_socio} deactivated their account")

    await sync_member(search, member)
    return build_member_response(member, club_today())
