"""Unit tests for medical fitness derivation.

Pure functions, no database involved.
"""

from datetime import date

import pytest
from services.members_service.models import MedicalResult, MedicalStatus
from services.members_service.services.medical import (
    apply_to_embedded,
    build_apto_medico,
    derive_medical_status,
)

TODAY = date(2026, 6, 10)
ADULT = date(1990, 1, 1)


@pytest.mark.unit
def test_flagged_valid_but_past_expiry_is_expired():
    """The stored flag alone never makes a record valid."""
    apto = {"valido": True, "fecha_vencimiento": "2026-06-09"}

    view = derive_medical_status(apto, ADULT, TODAY)

    assert view.status == MedicalStatus.VENCIDO
    assert view.allows_entry is False
    assert view.days_left == -1


@pytest.mark.unit
def test_expiry_day_itself_is_still_valid():
    apto = {"valido": True, "fecha_vencimiento": TODAY.isoformat()}

    view = derive_medical_status(apto, ADULT, TODAY)

    assert view.status == MedicalStatus.VALIDO
    assert view.days_left == 0
    assert view.expiring_soon is True


@pytest.mark.unit
def test_valid_far_from_expiry_is_not_expiring_soon():
    apto = {"valido": True, "fecha_vencimiento": "2027-01-01"}

    view = derive_medical_status(apto, ADULT, TODAY)

    assert view.status == MedicalStatus.VALIDO
    assert view.expiring_soon is False
    assert view.allows_entry is True


@pytest.mark.unit
def test_missing_record_is_pending():
    view = derive_medical_status(None, ADULT, TODAY)

    assert view.status == MedicalStatus.PENDIENTE
    assert view.allows_entry is False


@pytest.mark.unit
def test_not_fit_carries_reason():
    apto = {"valido": False, "razon_invalidez": "Lesión de hombro"}

    view = derive_medical_status(apto, ADULT, TODAY)

    assert view.status == MedicalStatus.INVALIDO
    assert "Lesión de hombro" in view.message


@pytest.mark.unit
def test_children_under_three_need_no_review():
    toddler = date(2024, 7, 1)

    view = derive_medical_status(None, toddler, TODAY)

    assert view.status == MedicalStatus.NO_APLICA
    assert view.allows_entry is True


@pytest.mark.unit
def test_birth_date_as_iso_string_is_accepted():
    view = derive_medical_status(None, "2024-07-01", TODAY)

    assert view.status == MedicalStatus.NO_APLICA


@pytest.mark.unit
def test_build_apto_for_not_fit_uses_default_reason():
    apto = build_apto_medico(MedicalResult.NO_APTO, TODAY, None, None)

    assert apto["valido"] is False
    assert apto["fecha_vencimiento"] is None
    assert apto["razon_invalidez"]


@pytest.mark.unit
def test_apply_to_embedded_returns_copy():
    people = [{"dni": "30111222", "nombre": "Ana"}]
    apto = build_apto_medico(MedicalResult.APTO, TODAY, date(2027, 6, 10), None)

    updated = apply_to_embedded(people, "30111222", apto)

    assert updated[0]["apto_medico"]["valido"] is True
    assert "apto_medico" not in people[0]
    assert apply_to_embedded(people, "99999999", apto) is None
