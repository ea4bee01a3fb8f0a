"""Guest pricing router."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import Principal
from libs.db.session import get_async_db
from services.guests_service.schemas import GuestPricingResponse, GuestPricingUpdate
from services.guests_service.services import guest_lists as guest_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/guests/pricing", tags=["guest-pricing"])


@router.get("", response_model=GuestPricingResponse)
async def get_guest_pricing(db: AsyncSession = Depends(get_async_db)):
    """Current guest prices. Public."""
    return await guest_ops.get_pricing(db)


@router.put("", response_model=GuestPricingResponse)
async def update_guest_pricing(
    payload: GuestPricingUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    pricing = await guest_ops.update_pricing(db, payload, principal.user_id)
    await db.commit()
    await db.refresh(pricing)
    return pricing
