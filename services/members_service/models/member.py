"""Core member models: the titular record, staff accounts and counters."""

import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from sqlalchemy import Date, DateTime, Enum as SAEnum, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .enums import ApprovalState, MemberStatus, enum_values


class Member(Base):
    """A titular member (socio).

    Family members and adherents are embedded JSON lists on this row and are
    the only source of truth for those people.
    """

    __tablename__ = "members"

    # Identity
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Null for members registered by an admin before they have a login.
    auth_id: Mapped[Optional[str]] = mapped_column(String, unique=True, index=True, nullable=True)
    numero_socio: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    email: Mapped[str] = mapped_column(String, index=True, nullable=False)
    nombre: Mapped[str] = mapped_column(String, nullable=False)
    apellido: Mapped[str] = mapped_column(String, nullable=False)
    dni: Mapped[str] = mapped_column(String, index=True, nullable=False)
    fecha_nacimiento: Mapped[date] = mapped_column(Date, nullable=False)

    # Contact
    telefono: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    direccion: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    empresa: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Photos. foto_url is the legacy name of the profile photo and must always
    # equal foto_perfil.
    foto_perfil: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    foto_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    foto_dni_frente: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    foto_dni_dorso: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    foto_carnet: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Status
    estado_socio: Mapped[MemberStatus] = mapped_column(
        SAEnum(
            MemberStatus,
            name="member_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=MemberStatus.PENDIENTE_VALIDACION,
        nullable=False,
    )
    miembro_desde: Mapped[date] = mapped_column(Date, default=date.today)

    # Medical fitness: {valido, fecha_emision, fecha_vencimiento, razon_invalidez, observaciones}
    apto_medico: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    ultima_revision_medica: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Embedded people
    family_members: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    adherentes: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    # Family change batch
    pending_family_changes: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)
    family_change_status: Mapped[Optional[ApprovalState]] = mapped_column(
        SAEnum(
            ApprovalState,
            name="family_change_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=True,
    )
    family_change_rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    family_change_submitted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    @property
    def full_name(self) -> str:
        return f"{self.nombre} {self.apellido}".strip()

    def __repr__(self):
        return f"<Member {self.numero_socio} {self.full_name}>"


class AdminUser(Base):
    """Role record for an identity. Staff roles live here, and so does 'socio'."""

    __tablename__ = "admin_users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    auth_id: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False)  # admin, medico, portero, socio
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    nombre: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    apellido: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    @property
    def display_name(self) -> Optional[str]:
        name = f"{self.nombre or ''} {self.apellido or ''}".strip()
        return name or self.email

    def __repr__(self):
        return f"<AdminUser {self.auth_id} ({self.role})>"


class Counter(Base):
    """Named monotonic counter, used for sequential member numbers."""

    __tablename__ = "counters"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
