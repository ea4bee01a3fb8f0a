"""Member onboarding, numbering and response building."""

from datetime import date
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import Role
from libs.common.config import get_settings
from libs.common.datetime_utils import age_on
from libs.common.logging import get_logger
from services.members_service.models import AdminUser, Counter, Member, MemberStatus
from services.members_service.schemas import AdminMemberCreate, MemberCreate, MemberResponse
from services.members_service.services.family_changes import (
    merge_family_batch,
    validate_family_batch,
)
from services.members_service.services.medical import derive_medical_status

logger = get_logger(__name__)
settings = get_settings()

MEMBER_NUMBER_COUNTER = "numero_socio"
MIN_SIGNUP_AGE = 18


async def next_member_number(db: AsyncSession) -> str:
    """
    Reserve the next sequential member number.

    The counter row is locked for the rest of the transaction, so two
    concurrent signups cannot get the same number.
    """
    result = await db.execute(
        select(Counter).where(Counter.name == MEMBER_NUMBER_COUNTER).with_for_update()
    )
    counter = result.scalar_one_or_none()
    if counter is None:
        counter = Counter(name=MEMBER_NUMBER_COUNTER, last_value=settings.FIRST_MEMBER_NUMBER)
        db.add(counter)
    else:
        counter.last_value += 1
    await db.flush()
    return str(counter.last_value)


async def _check_new_member(db: AsyncSession, payload, today: date) -> None:
    """Checks shared by signup and admin registration."""
    if age_on(payload.fecha_nacimiento, today) < MIN_SIGNUP_AGE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The account holder must be at least 18 years old",
        )

    duplicate_dni = await db.execute(select(Member.id).where(Member.dni == payload.dni))
    if duplicate_dni.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A member with this DNI already exists",
        )


async def complete_signup(
    db: AsyncSession,
    auth_id: str,
    payload: MemberCreate,
    today: date,
) -> Member:
    """Create the member record for an identity that has uploaded documents."""
    existing = await db.execute(select(Member).where(Member.auth_id == auth_id))
    if existing.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Member profile already exists",
        )

    await _check_new_member(db, payload, today)

    numero_socio = await next_member_number(db)
    member = Member(
        auth_id=auth_id,
        numero_socio=numero_socio,
        email=payload.email,
        nombre=payload.nombre.strip(),
        apellido=payload.apellido.strip(),
        dni=payload.dni,
        fecha_nacimiento=payload.fecha_nacimiento,
        telefono=payload.telefono,
        direccion=payload.direccion,
        empresa=payload.empresa,
        foto_perfil=payload.foto_perfil,
        foto_url=payload.foto_perfil,
        foto_dni_frente=payload.foto_dni_frente,
        foto_dni_dorso=payload.foto_dni_dorso,
        foto_carnet=payload.foto_carnet,
        estado_socio=MemberStatus.PENDIENTE_VALIDACION,
        miembro_desde=today,
        family_members=[],
        adherentes=[],
    )
    db.add(member)

    role_result = await db.execute(select(AdminUser).where(AdminUser.auth_id == auth_id))
    if role_result.scalar_one_or_none() is None:
        db.add(
            AdminUser(
                auth_id=auth_id,
                role=Role.SOCIO.value,
                email=payload.email,
                nombre=member.nombre,
                apellido=member.apellido,
            )
        )

    await db.commit()
    await db.refresh(member)
    logger.info(f"Member {member.numero_socio} created for auth id {auth_id}")
    return member


async def register_member(
    db: AsyncSession,
    payload: AdminMemberCreate,
    registered_by: str,
    today: date,
) -> Member:
    """
    Create a member on behalf of the club.

    The record has no login yet; an initial family group is stored as
    already approved. Medical records start empty, so everyone shows as
    pending review.
    """
    await _check_new_member(db, payload, today)

    member = Member(
        auth_id=None,
        email=payload.email,
        nombre=payload.nombre.strip(),
        apellido=payload.apellido.strip(),
        dni=payload.dni,
        fecha_nacimiento=payload.fecha_nacimiento,
        telefono=payload.telefono,
        direccion=payload.direccion,
        empresa=payload.empresa,
        foto_perfil=payload.foto_perfil,
        foto_url=payload.foto_perfil,
        foto_dni_frente=payload.foto_dni_frente,
        foto_dni_dorso=payload.foto_dni_dorso,
        foto_carnet=payload.foto_carnet,
        estado_socio=payload.estado_socio,
        miembro_desde=today,
        adherentes=[],
    )
    validate_family_batch(member, payload.familiares)
    member.family_members = merge_family_batch(
        [], [item.model_dump(mode="json", exclude_none=True) for item in payload.familiares]
    )

    member.numero_socio = await next_member_number(db)
    db.add(member)
    await db.commit()
    await db.refresh(member)
    logger.info(f"Member {member.numero_socio} registered by {registered_by}")
    return member


def _with_medical_status(people: list, today: date) -> list[dict]:
    enriched = []
    for person in people or []:
        view = derive_medical_status(
            person.get("apto_medico"), person.get("fecha_nacimiento"), today
        )
        enriched.append({**person, "medical_status": view.as_dict()})
    return enriched


def build_member_response(member: Member, today: date) -> MemberResponse:
    """Serialize a member with derived medical status on every person."""
    data = MemberResponse.model_validate(member).model_dump()
    data.update(
        medical_status=derive_medical_status(
            member.apto_medico, member.fecha_nacimiento, today
        ).as_dict(),
        family_members=_with_medical_status(member.family_members, today),
        adherentes=_with_medical_status(member.adherentes, today),
    )
    return MemberResponse.model_validate(data)


async def get_member_or_404(db: AsyncSession, member_id) -> Member:
    result = await db.execute(select(Member).where(Member.id == member_id))
    member = result.scalar_one_or_none()
    if not member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member not found",
        )
    return member


def find_embedded(people: list, person_id: Optional[str]) -> Optional[dict]:
    for person in people or []:
        if person.get("id") == person_id:
            return person
    return None
