"""Resolving search hits to authoritative records and deciding gate access.

The search index only finds candidates. Every decision is made on the
record re-read from the database, since index entries can be stale.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.common.datetime_utils import parse_date
from libs.common.logging import get_logger
from libs.common.text_utils import full_name
from services.guests_service.models import BirthdayBooking, BookingStatus, DailyGuestList
from services.members_service.models import (
    AdherentRequestStatus,
    AdherentStatus,
    ApprovalState,
    Member,
    MemberStatus,
    PersonType,
)
from services.members_service.services.medical import MedicalStatusView, derive_medical_status
from services.members_service.services.search_sync import record_person_type

logger = get_logger(__name__)

ACTIVE_ADHERENT_STATES = (
    AdherentRequestStatus.APROBADO.value,
    AdherentRequestStatus.PENDIENTE_ELIMINACION.value,
)


@dataclass
class ResolvedPerson:
    person_type: PersonType
    person_id: str
    member: Member
    record: dict
    visit_date: Optional[date] = None
    guest_list: Optional[DailyGuestList] = None
    booking: Optional[BirthdayBooking] = None

    @property
    def nombre(self) -> str:
        return self.record.get("nombre", "")

    @property
    def apellido(self) -> str:
        return self.record.get("apellido", "")

    @property
    def dni(self) -> str:
        return self.record.get("dni", "")

    @property
    def display_name(self) -> str:
        return full_name(self.nombre, self.apellido)

    @property
    def already_entered(self) -> bool:
        return bool(self.record.get("ingresado"))


@dataclass
class AccessVerdict:
    allowed: bool
    medical: Optional[MedicalStatusView]
    reasons: list[str] = field(default_factory=list)


def titular_as_record(member: Member) -> dict:
    return {
        "id": str(member.id),
        "nombre": member.nombre,
        "apellido": member.apellido,
        "dni": member.dni,
        "fecha_nacimiento": member.fecha_nacimiento.isoformat(),
        "foto_perfil": member.foto_perfil,
        "foto_url": member.foto_url or member.foto_perfil,
        "apto_medico": member.apto_medico,
    }


def _find_by_dni(people: list, dni: str) -> Optional[dict]:
    for person in people or []:
        if person.get("dni") == dni:
            return person
    return None


async def _load_member(db: AsyncSession, member_id) -> Optional[Member]:
    try:
        member_uuid = member_id if isinstance(member_id, uuid.UUID) else uuid.UUID(str(member_id))
    except (TypeError, ValueError):
        return None
    return await db.get(Member, member_uuid)


async def resolve_person(
    db: AsyncSession,
    person_type: PersonType,
    member_id,
    dni: Optional[str] = None,
    visit_date: Optional[date] = None,
    booking_id: Optional[uuid.UUID] = None,
) -> Optional[ResolvedPerson]:
    """Load a person from the authoritative store, or None when it is gone."""
    member = await _load_member(db, member_id)
    if member is None:
        return None

    if person_type == PersonType.TITULAR:
        return ResolvedPerson(PersonType.TITULAR, str(member.id), member, titular_as_record(member))

    if person_type == PersonType.FAMILIAR:
        person = _find_by_dni(member.family_members, dni)
        if person is None or person.get("estado_validacion", ApprovalState.APROBADO.value) != ApprovalState.APROBADO.value:
            return None
        return ResolvedPerson(PersonType.FAMILIAR, person.get("id") or dni, member, person)

    if person_type == PersonType.ADHERENTE:
        person = _find_by_dni(member.adherentes, dni)
        if person is None:
            return None
        return ResolvedPerson(PersonType.ADHERENTE, person.get("id") or dni, member, person)

    if person_type == PersonType.INVITADO_DIARIO:
        if visit_date is None:
            return None
        result = await db.execute(
            select(DailyGuestList).where(
                DailyGuestList.member_id == member.id,
                DailyGuestList.visit_date == visit_date,
            )
        )
        guest_list = result.scalar_one_or_none()
        person = _find_by_dni(guest_list.guests if guest_list else [], dni)
        if person is None:
            return None
        return ResolvedPerson(
            PersonType.INVITADO_DIARIO,
            person.get("id") or dni,
            member,
            person,
            visit_date=visit_date,
            guest_list=guest_list,
        )

    if person_type == PersonType.INVITADO_CUMPLEANOS:
        if booking_id is None:
            return None
        booking = await db.get(BirthdayBooking, booking_id)
        if booking is None or booking.member_id != member.id or booking.status != BookingStatus.APROBADA:
            return None
        person = _find_by_dni(booking.guests, dni)
        if person is None:
            return None
        return ResolvedPerson(
            PersonType.INVITADO_CUMPLEANOS,
            person.get("id") or dni,
            member,
            person,
            visit_date=booking.event_date,
            booking=booking,
        )

    return None


async def resolve_hit(db: AsyncSession, hit: dict) -> Optional[ResolvedPerson]:
    """Re-fetch the record behind a search hit."""
    person_type = record_person_type(hit)
    if person_type is None:
        logger.warning(f"Search hit {hit.get('objectID')} has unknown type {hit.get('tipo')}")
        return None

    if person_type == PersonType.TITULAR:
        return await resolve_person(db, person_type, hit.get("socioId") or hit.get("objectID"))

    return await resolve_person(
        db,
        person_type,
        hit.get("socioTitularId"),
        dni=hit.get("dni"),
        visit_date=parse_date(hit.get("fechaVisita")),
    )


def access_verdict(person: ResolvedPerson, today: date) -> AccessVerdict:
    """Titular must be active and the person must have valid medical fitness.

    Adherents also need an approved, active adherent record. Guests are only
    admitted on their visit date and only once.
    """
    reasons = []
    member = person.member

    if member.estado_socio != MemberStatus.ACTIVO:
        if person.person_type == PersonType.TITULAR:
            reasons.append(f"Socio se encuentra {member.estado_socio.value}")
        else:
            reasons.append(f"El socio titular se encuentra {member.estado_socio.value}")

    if person.person_type == PersonType.ADHERENTE:
        if (
            person.record.get("estado_solicitud") not in ACTIVE_ADHERENT_STATES
            or person.record.get("estado_adherente") != AdherentStatus.ACTIVO.value
        ):
            reasons.append("Adherente no aprobado o inactivo")

    if person.person_type in (PersonType.INVITADO_DIARIO, PersonType.INVITADO_CUMPLEANOS):
        if person.visit_date != today:
            reasons.append("La invitación no corresponde a la fecha de hoy")
        if person.already_entered:
            reasons.append("El invitado ya registró su ingreso")

    medical = None
    if person.person_type != PersonType.INVITADO_CUMPLEANOS:
        medical = derive_medical_status(
            person.record.get("apto_medico"), person.record.get("fecha_nacimiento"), today
        )
        if not medical.allows_entry:
            reasons.append(f"Apto médico: {medical.message}")

    return AccessVerdict(allowed=not reasons, medical=medical, reasons=reasons)


def member_group(member: Member) -> list[ResolvedPerson]:
    """Titular, approved family members and adherents shown together at the gate."""
    group = [ResolvedPerson(PersonType.TITULAR, str(member.id), member, titular_as_record(member))]
    for person in member.family_members or []:
        if person.get("estado_validacion", ApprovalState.APROBADO.value) == ApprovalState.APROBADO.value:
            group.append(ResolvedPerson(PersonType.FAMILIAR, person.get("id") or person.get("dni"), member, person))
    for person in member.adherentes or []:
        if person.get("estado_solicitud") in ACTIVE_ADHERENT_STATES:
            group.append(ResolvedPerson(PersonType.ADHERENTE, person.get("id") or person.get("dni"), member, person))
    return group
