"""Pydantic schemas for gate search, lookup, entries and stats."""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from services.access_service.models import AccessDirection
from services.members_service.models import PersonType
from services.members_service.schemas import MedicalStatusResponse


class SearchRequest(BaseModel):
    query: str = Field("", max_length=100)
    limit: int = Field(10, ge=1, le=50)


class SearchHit(BaseModel):
    object_id: str
    tipo: Optional[str] = None
    person_type: Optional[PersonType] = None
    nombre: Optional[str] = None
    apellido: Optional[str] = None
    nombre_completo: Optional[str] = None
    dni: Optional[str] = None
    numero_socio: Optional[str] = None
    socio_titular_id: Optional[str] = None
    socio_titular_nombre: Optional[str] = None
    fecha_visita: Optional[date] = None
    foto_url: Optional[str] = None


class SearchResponse(BaseModel):
    query: str
    hits: List[SearchHit]


class LookupRequest(BaseModel):
    query: str = Field(..., max_length=100)


class PersonView(BaseModel):
    """A person as shown at the gate, with the access decision."""

    person_type: PersonType
    person_id: str
    member_id: uuid.UUID
    numero_socio: str
    titular_nombre: str
    estado_socio: str
    nombre: str
    apellido: str
    dni: str
    fecha_nacimiento: Optional[date] = None
    foto_url: Optional[str] = None
    visit_date: Optional[date] = None
    booking_id: Optional[uuid.UUID] = None
    already_entered: bool = False
    is_birthday: bool = False
    medical: Optional[MedicalStatusResponse] = None
    allowed: bool
    reasons: List[str] = Field(default_factory=list)


class LookupResponse(BaseModel):
    found: bool
    person: Optional[PersonView] = None
    group: List[PersonView] = Field(default_factory=list)


class EntryCreate(BaseModel):
    person_type: PersonType
    member_id: uuid.UUID
    dni: Optional[str] = None
    visit_date: Optional[date] = None
    booking_id: Optional[uuid.UUID] = None
    direction: AccessDirection = AccessDirection.ENTRADA

    @model_validator(mode="after")
    def check_identifiers(self):
        if self.person_type != PersonType.TITULAR and not self.dni:
            raise ValueError("dni is required for family members, adherents and guests")
        if self.person_type == PersonType.INVITADO_CUMPLEANOS and not self.booking_id:
            raise ValueError("booking_id is required for birthday guests")
        return self


class AccessLogResponse(BaseModel):
    id: uuid.UUID
    person_id: str
    person_type: PersonType
    member_id: Optional[uuid.UUID] = None
    nombre: str
    dni: str
    direction: AccessDirection
    access_date: date
    recorded_at: datetime
    recorded_by: str
    recorded_by_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class DailyStatsResponse(BaseModel):
    stats_date: date
    total: int
    breakdown: dict[str, int]


class BackfillResponse(BaseModel):
    members: int
    guest_lists: int
    records: int
