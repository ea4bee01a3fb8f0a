"""Adherents: associate members sponsored by a titular and approved one by one."""

import copy
import uuid
from datetime import datetime

from fastapi import HTTPException, status

from libs.common.logging import get_logger
from services.members_service.models import (
    AdherentRequestStatus,
    AdherentStatus,
    Member,
)
from services.members_service.schemas import AdherentCreate

logger = get_logger(__name__)


def _find_index(member: Member, adherent_id: str) -> int:
    for index, adherent in enumerate(member.adherentes or []):
        if adherent.get("id") == adherent_id:
            return index
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Adherent not found",
    )


def _transition(
    member: Member,
    adherent_id: str,
    expected: AdherentRequestStatus,
    **changes,
) -> dict:
    """Copy-modify-assign so the JSON column is flagged dirty."""
    index = _find_index(member, adherent_id)
    adherentes = copy.deepcopy(member.adherentes)
    adherent = adherentes[index]
    if adherent.get("estado_solicitud") != expected.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Adherent request is {adherent.get('estado_solicitud')}",
        )
    adherent.update(changes)
    member.adherentes = adherentes
    return adherent


def add_adherent(member: Member, payload: AdherentCreate, now: datetime) -> dict:
    if payload.dni == member.dni:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An adherent cannot share the account holder's DNI",
        )
    for existing in member.adherentes or []:
        if existing.get("dni") == payload.dni:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An adherent with this DNI is already registered",
            )

    adherent = payload.model_dump(mode="json", exclude_none=True)
    adherent.update(
        id=uuid.uuid4().hex,
        estado_solicitud=AdherentRequestStatus.PENDIENTE.value,
        estado_adherente=AdherentStatus.INACTIVO.value,
        motivo_rechazo=None,
        apto_medico=None,
        created_at=now.isoformat(),
    )
    if adherent.get("foto_perfil"):
        adherent["foto_url"] = adherent["foto_perfil"]
    member.adherentes = [*(member.adherentes or []), adherent]
    logger.info(f"Adherent {adherent['dni']} proposed by member {member.numero_socio}")
    return adherent


def approve_adherent(member: Member, adherent_id: str) -> dict:
    return _transition(
        member,
        adherent_id,
        AdherentRequestStatus.PENDIENTE,
        estado_solicitud=AdherentRequestStatus.APROBADO.value,
        estado_adherente=AdherentStatus.ACTIVO.value,
        motivo_rechazo=None,
    )


def reject_adherent(member: Member, adherent_id: str, reason: str) -> dict:
    return _transition(
        member,
        adherent_id,
        AdherentRequestStatus.PENDIENTE,
        estado_solicitud=AdherentRequestStatus.RECHAZADO.value,
        estado_adherente=AdherentStatus.INACTIVO.value,
        motivo_rechazo=reason,
    )


def request_adherent_deletion(member: Member, adherent_id: str) -> dict:
    """Approved adherents go through admin review before removal. Pending or
    rejected ones are withdrawn immediately."""
    index = _find_index(member, adherent_id)
    current = member.adherentes[index].get("estado_solicitud")
    if current in (AdherentRequestStatus.PENDIENTE.value, AdherentRequestStatus.RECHAZADO.value):
        adherentes = copy.deepcopy(member.adherentes)
        removed = adherentes.pop(index)
        member.adherentes = adherentes
        return removed
    return _transition(
        member,
        adherent_id,
        AdherentRequestStatus.APROBADO,
        estado_solicitud=AdherentRequestStatus.PENDIENTE_ELIMINACION.value,
    )


def approve_adherent_deletion(member: Member, adherent_id: str) -> dict:
    index = _find_index(member, adherent_id)
    adherent = member.adherentes[index]
    if adherent.get("estado_solicitud") != AdherentRequestStatus.PENDIENTE_ELIMINACION.value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Adherent has no pending deletion request",
        )
    adherentes = copy.deepcopy(member.adherentes)
    removed = adherentes.pop(index)
    member.adherentes = adherentes
    logger.info(f"Adherent {removed.get('dni')} removed from member {member.numero_socio}")
    return removed


def reject_adherent_deletion(member: Member, adherent_id: str) -> dict:
    return _transition(
        member,
        adherent_id,
        AdherentRequestStatus.PENDIENTE_ELIMINACION,
        estado_solicitud=AdherentRequestStatus.APROBADO.value,
    )


def pending_adherents(member: Member) -> list[dict]:
    pending = (
        AdherentRequestStatus.PENDIENTE.value,
        AdherentRequestStatus.PENDIENTE_ELIMINACION.value,
    )
    return [a for a in member.adherentes or [] if a.get("estado_solicitud") in pending]
