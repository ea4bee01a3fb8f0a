"""Pydantic schemas for daily guests, birthday bookings and pricing."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.guests_service.models import BookingStatus
from services.members_service.schemas.member import DNI_PATTERN


# ============================================================================
# GUESTS
# ============================================================================


class GuestInput(BaseModel):
    nombre: str = Field(..., min_length=2)
    apellido: str = Field(..., min_length=2)
    dni: str = Field(..., pattern=DNI_PATTERN)
    fecha_nacimiento: Optional[date] = None

    @field_validator("nombre", "apellido")
    @classmethod
    def strip_names(cls, value: str) -> str:
        return value.strip()


class GuestEntry(BaseModel):
    id: str
    nombre: str
    apellido: str
    dni: str
    fecha_nacimiento: Optional[date] = None
    ingresado: bool = False
    ingresado_at: Optional[datetime] = None
    registrado_por: Optional[str] = None
    registrado_por_nombre: Optional[str] = None
    apto_medico: Optional[dict] = None


def _unique_dnis(guests: List[GuestInput]) -> List[GuestInput]:
    seen = set()
    for guest in guests:
        if guest.dni in seen:
            raise ValueError(f"Duplicate guest DNI {guest.dni}")
        seen.add(guest.dni)
    return guests


# ============================================================================
# DAILY GUESTS
# ============================================================================


class DailyGuestListUpsert(BaseModel):
    """The complete guest list for today. Omitted guests are removed."""

    guests: List[GuestInput] = Field(default_factory=list)

    @field_validator("guests")
    @classmethod
    def unique_dnis(cls, guests: List[GuestInput]) -> List[GuestInput]:
        return _unique_dnis(guests)


class DailyGuestListResponse(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    member_name: str
    numero_socio: str
    visit_date: date
    guests: List[GuestEntry]
    titular_ingresado: bool = False
    titular_ingresado_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# BIRTHDAY BOOKINGS
# ============================================================================


class BirthdayBookingCreate(BaseModel):
    event_date: date
    guests: List[GuestInput] = Field(default_factory=list)

    @field_validator("guests")
    @classmethod
    def unique_dnis(cls, guests: List[GuestInput]) -> List[GuestInput]:
        return _unique_dnis(guests)


class BirthdayBookingUpdate(BaseModel):
    event_date: Optional[date] = None
    guests: Optional[List[GuestInput]] = None

    @field_validator("guests")
    @classmethod
    def unique_dnis(cls, guests: Optional[List[GuestInput]]) -> Optional[List[GuestInput]]:
        if guests is None:
            return guests
        return _unique_dnis(guests)


class BirthdayBookingResponse(BaseModel):
    id: uuid.UUID
    member_id: uuid.UUID
    member_name: str
    numero_socio: str
    event_date: date
    year: int
    guests: List[GuestEntry]
    status: BookingStatus
    titular_ingresado: bool = False
    titular_ingresado_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# PRICING
# ============================================================================


class GuestPricingUpdate(BaseModel):
    precio_invitado_diario: Optional[Decimal] = Field(None, ge=0)
    precio_invitado_cumpleanos: Optional[Decimal] = Field(None, ge=0)


class GuestPricingResponse(BaseModel):
    precio_invitado_diario: Decimal
    precio_invitado_cumpleanos: Decimal
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
