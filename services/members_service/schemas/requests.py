"""Schemas for photo-change requests, medical reviews and the admin dashboard."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from services.members_service.models import (
    MedicalResult,
    PersonType,
    PhotoRequestStatus,
    PhotoSlot,
)


# ============================================================================
# PHOTO CHANGE REQUESTS
# ============================================================================


class PhotoChangeRequestResponse(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    member_name: str
    numero_socio: str
    person_type: PersonType
    person_id: Optional[str] = None
    person_name: str
    slot: PhotoSlot
    current_url: Optional[str] = None
    new_url: str
    approved_url: Optional[str] = None
    status: PhotoRequestStatus
    rejection_reason: Optional[str] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    requested_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReconcileResponse(BaseModel):
    examined: int
    cleaned: int
    request_ids: list[uuid.UUID]


# ============================================================================
# MEDICAL REVIEWS
# ============================================================================


class MedicalReviewCreate(BaseModel):
    member_id: uuid.UUID
    person_type: PersonType = PersonType.TITULAR
    person_dni: Optional[str] = None
    result: MedicalResult
    review_date: Optional[date] = None
    expiry_date: Optional[date] = None
    observaciones: Optional[str] = None
    visit_date: Optional[date] = None  # daily guests: which list

    @model_validator(mode="after")
    def check_target(self):
        if self.person_type == PersonType.INVITADO_CUMPLEANOS:
            raise ValueError("Birthday guests are not medically reviewed")
        if self.person_type != PersonType.TITULAR and not self.person_dni:
            raise ValueError("person_dni is required for family members, adherents and guests")
        if self.result == MedicalResult.APTO and self.expiry_date is None:
            raise ValueError("expiry_date is required when the result is apto")
        return self


class MedicalReviewResponse(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    person_type: PersonType
    person_dni: str
    person_name: str
    result: MedicalResult
    review_date: date
    expiry_date: Optional[date] = None
    observaciones: Optional[str] = None
    reviewed_by: str
    reviewed_by_name: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# DASHBOARD
# ============================================================================


class DashboardResponse(BaseModel):
    members_by_status: dict[str, int]
    total_members: int
    pending_photo_requests: int
    pending_family_changes: int
    pending_adherent_requests: int
    medical_expiring_soon: int
    entries_today: int = 0
    entries_today_by_type: dict[str, int] = Field(default_factory=dict)
    daily_guests_today: int = 0
    upcoming_birthday_bookings: int = 0
