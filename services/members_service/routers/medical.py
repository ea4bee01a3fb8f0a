"""Medical review router for admins and medical staff."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_medical
from libs.auth.models import Principal
from libs.common.container import get_search
from libs.common.datetime_utils import club_today
from libs.common.search import AlgoliaSearchClient
from libs.db.session import get_async_db
from services.members_service.models import MedicalReview, PersonType
from services.members_service.schemas import MedicalReviewCreate, MedicalReviewResponse
from services.members_service.services.medical_reviews import record_review
from services.members_service.services.search_sync import sync_member
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/medical", tags=["medical"])


@router.post(
    "/reviews", response_model=MedicalReviewResponse, status_code=status.HTTP_201_CREATED
)
async def create_medical_review(
    payload: MedicalReviewCreate,
    principal: Principal = Depends(require_medical),
    db: AsyncSession = Depends(get_async_db),
    search: AlgoliaSearchClient = Depends(get_search),
):
    """Record a review and update the person's medical fitness."""
    review, member = await record_review(db, payload, principal, club_today())
    if payload.person_type != PersonType.INVITADO_DIARIO:
        await sync_member(search, member)
    return review


@router.get("/reviews", response_model=List[MedicalReviewResponse])
async def list_medical_reviews(
    member_id: Optional[uuid.UUID] = None,
    limit: int = 100,
    _: Principal = Depends(require_medical),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(MedicalReview).order_by(MedicalReview.created_at.desc()).limit(limit)
    if member_id:
        query = query.where(MedicalReview.member_id == member_id)
    result = await db.execute(query)
    return result.scalars().all()
