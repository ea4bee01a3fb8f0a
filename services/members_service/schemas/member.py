"""Pydantic schemas for members, family groups and adherents.

Embedded people (family members, adherents) are stored as JSON and
validated through these schemas on the way in.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from services.members_service.models import (
    AdherentRequestStatus,
    AdherentStatus,
    ApprovalState,
    MemberStatus,
    Relationship,
)

DNI_PATTERN = r"^\d{7,8}$"
PHONE_PATTERN = r"^\d{10,}$"


# ============================================================================
# MEDICAL
# ============================================================================


class AptoMedico(BaseModel):
    valido: bool = False
    fecha_emision: Optional[date] = None
    fecha_vencimiento: Optional[date] = None
    razon_invalidez: Optional[str] = None
    observaciones: Optional[str] = None


class MedicalStatusResponse(BaseModel):
    status: str
    message: str
    expires_on: Optional[date] = None
    days_left: Optional[int] = None
    expiring_soon: bool = False
    allows_entry: bool = False


# ============================================================================
# MEMBER
# ============================================================================


class MemberCreate(BaseModel):
    """Signup completion, sent after the documents were uploaded."""

    nombre: str = Field(..., min_length=2)
    apellido: str = Field(..., min_length=2)
    dni: str = Field(..., pattern=DNI_PATTERN)
    fecha_nacimiento: date
    email: EmailStr
    telefono: str = Field(..., pattern=PHONE_PATTERN)
    direccion: str = Field(..., min_length=5)
    empresa: Optional[str] = None
    foto_perfil: str
    foto_dni_frente: str
    foto_dni_dorso: str
    foto_carnet: Optional[str] = None


class MemberUpdate(BaseModel):
    """Fields a member may change on their own record."""

    telefono: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    direccion: Optional[str] = Field(None, min_length=5)
    email: Optional[EmailStr] = None
    empresa: Optional[str] = None

    @field_validator("email")
    @classmethod
    def email_not_null(cls, v):
        # Omit a field to leave it unchanged; null would blank a required column.
        if v is None:
            raise ValueError("email cannot be null")
        return v


class AdminMemberUpdate(MemberUpdate):
    nombre: Optional[str] = Field(None, min_length=2)
    apellido: Optional[str] = Field(None, min_length=2)
    dni: Optional[str] = Field(None, pattern=DNI_PATTERN)
    fecha_nacimiento: Optional[date] = None

    @field_validator("nombre", "apellido", "dni", "fecha_nacimiento")
    @classmethod
    def required_not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class MemberStatusUpdate(BaseModel):
    estado_socio: MemberStatus


class EmbeddedPersonResponse(BaseModel):
    """A family member or adherent as stored on the titular's record."""

    id: Optional[str] = None
    nombre: str
    apellido: str
    dni: str
    fecha_nacimiento: Optional[date] = None
    relacion: Optional[Relationship] = None
    telefono: Optional[str] = None
    email: Optional[str] = None
    direccion: Optional[str] = None
    foto_perfil: Optional[str] = None
    foto_url: Optional[str] = None
    foto_dni_frente: Optional[str] = None
    foto_dni_dorso: Optional[str] = None
    foto_carnet: Optional[str] = None
    estado_validacion: Optional[str] = None
    estado_solicitud: Optional[AdherentRequestStatus] = None
    estado_adherente: Optional[AdherentStatus] = None
    motivo_rechazo: Optional[str] = None
    apto_medico: Optional[AptoMedico] = None
    medical_status: Optional[MedicalStatusResponse] = None


class MemberResponse(BaseModel):
    id: uuid.UUID
    auth_id: Optional[str] = None
    numero_socio: str
    email: str
    nombre: str
    apellido: str
    dni: str
    fecha_nacimiento: date
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    empresa: Optional[str] = None
    foto_perfil: Optional[str] = None
    foto_url: Optional[str] = None
    foto_dni_frente: Optional[str] = None
    foto_dni_dorso: Optional[str] = None
    foto_carnet: Optional[str] = None
    estado_socio: MemberStatus
    miembro_desde: Optional[date] = None
    apto_medico: Optional[AptoMedico] = None
    ultima_revision_medica: Optional[date] = None
    medical_status: Optional[MedicalStatusResponse] = None
    family_members: list[EmbeddedPersonResponse] = []
    adherentes: list[EmbeddedPersonResponse] = []
    family_change_status: Optional[ApprovalState] = None
    family_change_rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MemberSummary(BaseModel):
    id: uuid.UUID
    numero_socio: str
    nombre: str
    apellido: str
    dni: str
    email: str
    estado_socio: MemberStatus
    family_change_status: Optional[ApprovalState] = None

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# FAMILY GROUP
# ============================================================================


class FamilyMemberInput(BaseModel):
    """One entry of a family-change batch. ``id`` is set for existing people."""

    id: Optional[str] = None
    nombre: str = Field(..., min_length=2)
    apellido: str = Field(..., min_length=2)
    dni: str = Field(..., pattern=DNI_PATTERN)
    fecha_nacimiento: date
    relacion: Relationship
    telefono: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[EmailStr] = None
    direccion: Optional[str] = Field(None, min_length=5)
    # Photos only apply to new entries; existing people change photos through
    # photo-change requests.
    foto_perfil: Optional[str] = None
    foto_dni_frente: Optional[str] = None
    foto_dni_dorso: Optional[str] = None

    @field_validator("nombre", "apellido")
    @classmethod
    def strip_names(cls, v: str) -> str:
        return v.strip()


class FamilyChangeSubmit(BaseModel):
    """The complete proposed family group."""

    familiares: list[FamilyMemberInput]


class AdminMemberCreate(BaseModel):
    """A member registered at the front desk, with no login of their own yet."""

    nombre: str = Field(..., min_length=2)
    apellido: str = Field(..., min_length=2)
    dni: str = Field(..., pattern=DNI_PATTERN)
    fecha_nacimiento: date
    email: EmailStr
    telefono: str = Field(..., pattern=PHONE_PATTERN)
    direccion: str = Field(..., min_length=5)
    empresa: Optional[str] = None
    estado_socio: MemberStatus = MemberStatus.ACTIVO
    foto_perfil: Optional[str] = None
    foto_dni_frente: Optional[str] = None
    foto_dni_dorso: Optional[str] = None
    foto_carnet: Optional[str] = None
    familiares: list[FamilyMemberInput] = []


class FamilyOverlayEntry(EmbeddedPersonResponse):
    display_state: str
    removal_pending: bool = False


class FamilyOverviewResponse(BaseModel):
    approved: list[EmbeddedPersonResponse]
    pending: Optional[list[EmbeddedPersonResponse]] = None
    status: Optional[ApprovalState] = None
    rejection_reason: Optional[str] = None
    submitted_at: Optional[datetime] = None
    display: list[FamilyOverlayEntry]


class RejectionPayload(BaseModel):
    reason: str = Field(..., min_length=1)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("A rejection reason is required")
        return v.strip()


class PendingFamilyChangeResponse(BaseModel):
    member_id: uuid.UUID
    numero_socio: str
    member_name: str
    submitted_at: Optional[datetime] = None
    current: list[EmbeddedPersonResponse]
    proposed: list[EmbeddedPersonResponse]


# ============================================================================
# ADHERENTS
# ============================================================================


class AdherentCreate(BaseModel):
    nombre: str = Field(..., min_length=2)
    apellido: str = Field(..., min_length=2)
    dni: str = Field(..., pattern=DNI_PATTERN)
    fecha_nacimiento: date
    telefono: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[EmailStr] = None
    direccion: Optional[str] = Field(None, min_length=5)
    foto_perfil: Optional[str] = None
    foto_dni_frente: Optional[str] = None
    foto_dni_dorso: Optional[str] = None


class PendingAdherentResponse(BaseModel):
    member_id: uuid.UUID
    numero_socio: str
    member_name: str
    adherent: EmbeddedPersonResponse
