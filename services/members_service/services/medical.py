"""Medical fitness derivation and review application.

Validity is always derived from the signed-off flag plus the expiry date
against today's date. Nothing here stores a computed status.
"""

import copy
from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from libs.common.datetime_utils import age_on, parse_date
from services.members_service.models import MedicalResult, MedicalStatus

MIN_AGE_FOR_REVIEW = 3
EXPIRY_WARNING_DAYS = 7
DEFAULT_NO_APTO_REASON = "No apto según revisión médica"


@dataclass
class MedicalStatusView:
    status: MedicalStatus
    message: str
    expires_on: Optional[date] = None
    days_left: Optional[int] = None
    expiring_soon: bool = False

    @property
    def allows_entry(self) -> bool:
        return self.status in (MedicalStatus.VALIDO, MedicalStatus.NO_APLICA)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        data["allows_entry"] = self.allows_entry
        return data


def derive_medical_status(
    apto_medico: Optional[dict],
    birth_date,
    today: date,
) -> MedicalStatusView:
    """Derive a display status from an embedded ``apto_medico`` record.

    Children under three need no review. A record flagged valid whose expiry
    date is before ``today`` is expired; the expiry date itself is the last
    valid day.
    """
    birth = parse_date(birth_date)
    if birth is not None and age_on(birth, today) < MIN_AGE_FOR_REVIEW:
        return MedicalStatusView(
            status=MedicalStatus.NO_APLICA,
            message="Menor de 3 años (revisión no requerida)",
        )

    if not apto_medico:
        return MedicalStatusView(
            status=MedicalStatus.PENDIENTE,
            message="Sin datos de apto médico",
        )

    if apto_medico.get("valido") is False:
        reason = apto_medico.get("razon_invalidez")
        return MedicalStatusView(
            status=MedicalStatus.INVALIDO,
            message=f"Inválido ({reason})" if reason else "No apto (razón no especificada)",
        )

    if apto_medico.get("valido"):
        expires_on = parse_date(apto_medico.get("fecha_vencimiento"))
        if expires_on is None:
            return MedicalStatusView(
                status=MedicalStatus.VALIDO,
                message="Válido (sin fecha de vencimiento)",
            )
        if expires_on >= today:
            days_left = (expires_on - today).days
            return MedicalStatusView(
                status=MedicalStatus.VALIDO,
                message=f"Válido hasta {expires_on:%d/%m/%Y}",
                expires_on=expires_on,
                days_left=days_left,
                expiring_soon=days_left <= EXPIRY_WARNING_DAYS,
            )
        return MedicalStatusView(
            status=MedicalStatus.VENCIDO,
            message=f"Vencido (venció el {expires_on:%d/%m/%Y})",
            expires_on=expires_on,
            days_left=(expires_on - today).days,
        )

    return MedicalStatusView(
        status=MedicalStatus.PENDIENTE,
        message="Apto médico pendiente o información incompleta",
    )


def build_apto_medico(
    result: MedicalResult,
    review_date: date,
    expiry_date: Optional[date],
    observaciones: Optional[str],
) -> dict:
    """The embedded record written onto a person after a review."""
    if result == MedicalResult.APTO:
        return {
            "valido": True,
            "fecha_emision": review_date.isoformat(),
            "fecha_vencimiento": expiry_date.isoformat() if expiry_date else None,
            "razon_invalidez": None,
            "observaciones": observaciones,
        }
    return {
        "valido": False,
        "fecha_emision": review_date.isoformat(),
        "fecha_vencimiento": None,
        "razon_invalidez": observaciones or DEFAULT_NO_APTO_REASON,
        "observaciones": observaciones,
    }


def apply_to_embedded(people: list, dni: str, apto_medico: dict) -> Optional[list]:
    """
    Return a copy of ``people`` with the person matching ``dni`` updated, or
    None when nobody matches.
    """
    updated = copy.deepcopy(people or [])
    for person in updated:
        if person.get("dni") == dni:
            person["apto_medico"] = apto_medico
            return updated
    return None
