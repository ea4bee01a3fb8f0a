"""Recording medical reviews onto the reviewed person."""

from datetime import date

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import Principal
from libs.common.logging import get_logger
from libs.common.text_utils import full_name
from services.guests_service.models import DailyGuestList
from services.members_service.models import MedicalReview, Member, PersonType
from services.members_service.schemas import MedicalReviewCreate
from services.members_service.services.medical import apply_to_embedded, build_apto_medico
from services.members_service.services.members import get_member_or_404

logger = get_logger(__name__)


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


def _person_name(people: list, dni: str) -> str:
    for person in people:
        if person.get("dni") == dni:
            return full_name(person.get("nombre"), person.get("apellido"))
    return dni


async def record_review(
    db: AsyncSession,
    payload: MedicalReviewCreate,
    reviewer: Principal,
    today: date,
) -> tuple[MedicalReview, Member]:
    """
    Store the review and rewrite the reviewed person's ``apto_medico``.

    Returns the review and the host member, whose search records need a refresh.
    """
    member = await get_member_or_404(db, payload.member_id)
    review_date = payload.review_date or today
    apto = build_apto_medico(payload.result, review_date, payload.expiry_date, payload.observaciones)

    if payload.person_type == PersonType.TITULAR:
        dni = member.dni
        person_name = member.full_name
        member.apto_medico = apto
        member.ultima_revision_medica = review_date

    elif payload.person_type in (PersonType.FAMILIAR, PersonType.ADHERENTE):
        dni = payload.person_dni
        is_family = payload.person_type == PersonType.FAMILIAR
        people = member.family_members if is_family else member.adherentes
        updated = apply_to_embedded(people, dni, apto)
        if updated is None:
            raise _not_found("Family member" if is_family else "Adherent")
        person_name = _person_name(updated, dni)
        if is_family:
            member.family_members = updated
        else:
            member.adherentes = updated

    else:
        dni = payload.person_dni
        visit_date = payload.visit_date or review_date
        result = await db.execute(
            select(DailyGuestList).where(
                DailyGuestList.member_id == member.id,
                DailyGuestList.visit_date == visit_date,
            )
        )
        guest_list = result.scalar_one_or_none()
        updated = apply_to_embedded(guest_list.guests if guest_list else [], dni, apto)
        if updated is None:
            raise _not_found("Daily guest")
        person_name = _person_name(updated, dni)
        guest_list.guests = updated

    review = MedicalReview(
        member_id=member.id,
        person_type=payload.person_type,
        person_dni=dni,
        person_name=person_name,
        result=payload.result,
        review_date=review_date,
        expiry_date=payload.expiry_date,
        observaciones=payload.observaciones,
        reviewed_by=reviewer.user_id,
        reviewed_by_name=reviewer.display_name,
    )
    db.add(review)
    await db.commit()
    await db.refresh(review)
    logger.info(
        f"Medical review {review.result.value} recorded for {payload.person_type.value} {dni}"
    )
    return review, member
