"""Family-change batch workflow.

A member submits the complete proposed family group as one batch. While it
is pending no other batch can be submitted. An admin approves or rejects the
batch as a whole; a rejected batch is acknowledged by the member, which
returns the workflow to its idle state.

    None -> pendiente -> aprobado | rechazado
    rechazado -> None (acknowledge)
"""

import copy
import uuid
from collections import Counter
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status

from libs.common.logging import get_logger
from services.members_service.models import (
    ApprovalState,
    FamilyGroupType,
    Member,
    Relationship,
)
from services.members_service.schemas import FamilyMemberInput

logger = get_logger(__name__)

MAX_HIJOS = 12
MAX_PADRES = 2
MAX_CONYUGES = 1

# Stored on approved entries and only changed through their own workflows.
PROTECTED_FIELDS = (
    "foto_perfil",
    "foto_url",
    "foto_dni_frente",
    "foto_dni_dorso",
    "foto_carnet",
    "apto_medico",
)


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def group_type_of(items: list[FamilyMemberInput]) -> Optional[FamilyGroupType]:
    relations = {item.relacion for item in items}
    if not relations:
        return None
    if Relationship.PADRE in relations:
        return FamilyGroupType.PADRES
    return FamilyGroupType.CONYUGE_E_HIJOS


def validate_family_batch(member: Member, items: list[FamilyMemberInput]) -> None:
    """Relationship limits and group consistency. Field shapes are checked by
    the schema."""
    counts = Counter(item.relacion for item in items)
    if counts[Relationship.CONYUGE] > MAX_CONYUGES:
        raise _bad_request("Only one spouse can be registered")
    if counts[Relationship.HIJO] > MAX_HIJOS:
        raise _bad_request(f"No more than {MAX_HIJOS} children can be registered")
    if counts[Relationship.PADRE] > MAX_PADRES:
        raise _bad_request(f"No more than {MAX_PADRES} parents can be registered")
    if counts[Relationship.PADRE] and (counts[Relationship.CONYUGE] or counts[Relationship.HIJO]):
        raise _bad_request(
            "A family group is either spouse and children, or parents, not both"
        )

    dnis = [item.dni for item in items]
    if len(dnis) != len(set(dnis)):
        raise _bad_request("Each family member must have a different DNI")
    if member.dni in dnis:
        raise _bad_request("A family member cannot share the account holder's DNI")

    approved_ids = {person.get("id") for person in member.family_members or []}
    for item in items:
        if item.id and item.id not in approved_ids:
            raise _bad_request(f"Unknown family member id {item.id}")


def _to_entry(item: FamilyMemberInput) -> dict:
    return item.model_dump(mode="json", exclude_none=True)


def submit_family_changes(
    member: Member, items: list[FamilyMemberInput], now: datetime
) -> None:
    if member.family_change_status == ApprovalState.PENDIENTE:
        raise _bad_request(
            "A family change request is already pending review"
        )
    validate_family_batch(member, items)

    member.pending_family_changes = [_to_entry(item) for item in items]
    member.family_change_status = ApprovalState.PENDIENTE
    member.family_change_rejection_reason = None
    member.family_change_submitted_at = now
    logger.info(f"Family change batch submitted by member {member.numero_socio}")


def _require_pending(member: Member) -> None:
    if member.family_change_status != ApprovalState.PENDIENTE:
        current = member.family_change_status.value if member.family_change_status else "none"
        raise _bad_request(f"No pending family change request (status is {current})")


def merge_family_batch(approved: list, batch: list) -> list:
    """
    Build the new approved family list from a batch.

    Entries with a known id replace the stored entry, keeping its photos and
    medical record. Entries without id are new and get one. Approved entries
    missing from the batch are removed.
    """
    stored_by_id = {person.get("id"): person for person in approved or [] if person.get("id")}
    merged = []
    for entry in copy.deepcopy(batch or []):
        stored = stored_by_id.get(entry.get("id"))
        if stored is not None:
            for field in PROTECTED_FIELDS:
                if field in stored:
                    entry[field] = stored[field]
                else:
                    entry.pop(field, None)
        else:
            entry["id"] = uuid.uuid4().hex
            if entry.get("foto_perfil"):
                entry["foto_url"] = entry["foto_perfil"]
        entry["estado_validacion"] = ApprovalState.APROBADO.value
        merged.append(entry)
    return merged


def approve_family_changes(member: Member) -> list[str]:
    """Apply the pending batch. Returns DNIs of removed family members."""
    _require_pending(member)
    merged = merge_family_batch(member.family_members, member.pending_family_changes)

    kept = {entry["dni"] for entry in merged}
    removed = [p.get("dni") for p in member.family_members or [] if p.get("dni") not in kept]

    member.family_members = merged
    member.pending_family_changes = None
    member.family_change_status = ApprovalState.APROBADO
    member.family_change_rejection_reason = None
    logger.info(f"Family change batch approved for member {member.numero_socio}")
    return removed


def reject_family_changes(member: Member, reason: str) -> None:
    _require_pending(member)
    if not reason or not reason.strip():
        raise _bad_request("A rejection reason is required")
    member.pending_family_changes = None
    member.family_change_status = ApprovalState.RECHAZADO
    member.family_change_rejection_reason = reason.strip()
    logger.info(f"Family change batch rejected for member {member.numero_socio}")


def acknowledge_rejection(member: Member) -> None:
    if member.family_change_status != ApprovalState.RECHAZADO:
        raise _bad_request("There is no rejected family change request to acknowledge")
    member.family_change_status = None
    member.family_change_rejection_reason = None


def overlay_family_changes(approved: list, pending: Optional[list]) -> list[dict]:
    """Display view: pending drafts over the approved list.

    Drafts replace approved entries with the same id, new drafts are appended,
    and approved entries the batch drops are flagged for removal.
    """
    approved = approved or []
    if not pending:
        return [
            {**person, "display_state": ApprovalState.APROBADO.value, "removal_pending": False}
            for person in approved
        ]

    drafts_by_id = {entry.get("id"): entry for entry in pending if entry.get("id")}
    display = []
    for person in approved:
        draft = drafts_by_id.get(person.get("id"))
        if draft is not None:
            display.append(
                {**person, **draft, "display_state": ApprovalState.PENDIENTE.value, "removal_pending": False}
            )
        else:
            display.append(
                {**person, "display_state": ApprovalState.APROBADO.value, "removal_pending": True}
            )
    for entry in pending:
        if not entry.get("id"):
            display.append(
                {**entry, "display_state": ApprovalState.PENDIENTE.value, "removal_pending": False}
            )
    return display
