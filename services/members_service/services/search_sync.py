"""Search index records for every person that can show up at the gate.

Index writes after a database commit are best effort: a failure is logged
and the request still succeeds. The admin backfill rebuilds the index.
"""

from datetime import date
from typing import Iterable, Optional

from libs.common.error_handler import DownstreamServiceError
from libs.common.logging import get_logger
from libs.common.search import AlgoliaSearchClient
from libs.common.text_utils import full_name
from services.members_service.models import (
    AdherentRequestStatus,
    ApprovalState,
    Member,
    PersonType,
)

logger = get_logger(__name__)

TYPE_TITULAR = "Socio Titular"
TYPE_FAMILIAR = "Familiar"
TYPE_ADHERENTE = "Adherente"
TYPE_INVITADO_DIARIO = "Invitado Diario"

RECORD_TYPES = {
    TYPE_TITULAR: PersonType.TITULAR,
    TYPE_FAMILIAR: PersonType.FAMILIAR,
    TYPE_ADHERENTE: PersonType.ADHERENTE,
    TYPE_INVITADO_DIARIO: PersonType.INVITADO_DIARIO,
}


def _person_fields(person: dict) -> dict:
    return {
        "nombre": person.get("nombre"),
        "apellido": person.get("apellido"),
        "nombreCompleto": full_name(person.get("nombre"), person.get("apellido")),
        "dni": person.get("dni"),
        "fechaNacimiento": person.get("fecha_nacimiento"),
        "fotoUrl": person.get("foto_url") or person.get("foto_perfil"),
        "aptoMedico": person.get("apto_medico"),
    }


def titular_record(member: Member) -> dict:
    record = _person_fields(
        {
            "nombre": member.nombre,
            "apellido": member.apellido,
            "dni": member.dni,
            "fecha_nacimiento": member.fecha_nacimiento.isoformat(),
            "foto_url": member.foto_url,
            "foto_perfil": member.foto_perfil,
            "apto_medico": member.apto_medico,
        }
    )
    record.update(
        objectID=str(member.id),
        tipo=TYPE_TITULAR,
        socioId=str(member.id),
        numeroSocio=member.numero_socio,
        estadoSocio=member.estado_socio.value,
    )
    return record


def embedded_record(member: Member, person: dict, tipo: str) -> dict:
    record = _person_fields(person)
    record.update(
        objectID=f"{member.id}-{person.get('dni')}",
        tipo=tipo,
        socioTitularId=str(member.id),
        socioTitularNombre=member.full_name,
        numeroSocio=member.numero_socio,
        personId=person.get("id"),
    )
    return record


def guest_record(member: Member, guest: dict, visit_date: date) -> dict:
    record = _person_fields(guest)
    record.update(
        objectID=guest_object_id(member.id, guest.get("dni"), visit_date),
        tipo=TYPE_INVITADO_DIARIO,
        socioTitularId=str(member.id),
        socioTitularNombre=member.full_name,
        fechaVisita=visit_date.isoformat(),
    )
    return record


def guest_object_id(member_id, dni: str, visit_date: date) -> str:
    return f"{member_id}-{dni}-{visit_date.isoformat()}"


def member_records(member: Member) -> list[dict]:
    """Titular plus approved family members and approved adherents."""
    records = [titular_record(member)]
    for person in member.family_members or []:
        if person.get("estado_validacion", ApprovalState.APROBADO.value) == ApprovalState.APROBADO.value:
            records.append(embedded_record(member, person, TYPE_FAMILIAR))
    for adherent in member.adherentes or []:
        if adherent.get("estado_solicitud") in (
            AdherentRequestStatus.APROBADO.value,
            AdherentRequestStatus.PENDIENTE_ELIMINACION.value,
        ):
            records.append(embedded_record(member, adherent, TYPE_ADHERENTE))
    return records


async def sync_member(search: AlgoliaSearchClient, member: Member, removed_dnis: Iterable[str] = ()) -> None:
    """Push a member's people to the index, dropping any removed ones."""
    try:
        await search.save_objects(member_records(member))
        stale = [f"{member.id}-{dni}" for dni in removed_dnis if dni]
        if stale:
            await search.delete_objects(stale)
    except DownstreamServiceError as e:
        logger.warning(f"Search sync failed for member {member.id}: {e}")


async def sync_daily_guests(
    search: AlgoliaSearchClient,
    member: Member,
    visit_date: date,
    guests: list[dict],
    removed_dnis: Iterable[str] = (),
) -> None:
    try:
        await search.save_objects([guest_record(member, g, visit_date) for g in guests])
        stale = [guest_object_id(member.id, dni, visit_date) for dni in removed_dnis if dni]
        if stale:
            await search.delete_objects(stale)
    except DownstreamServiceError as e:
        logger.warning(f"Search sync failed for daily guests of {member.id}: {e}")


def record_person_type(hit: dict) -> Optional[PersonType]:
    return RECORD_TYPES.get(hit.get("tipo"))
