"""Guest models: daily guest lists, birthday bookings and guest pricing."""

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from services.members_service.models.enums import enum_values


class BookingStatus(str, enum.Enum):
    APROBADA = "aprobada"
    CANCELADA = "cancelada"


class DailyGuestList(Base):
    """Guests a member brings on one visit date.

    ``guests`` entries: {id, nombre, apellido, dni, fecha_nacimiento,
    ingresado, ingresado_at, registrado_por, registrado_por_nombre, apto_medico}.
    """

    __tablename__ = "daily_guest_lists"
    __table_args__ = (
        UniqueConstraint("member_id", "visit_date", name="uq_daily_guest_list_member_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("members.id"), index=True, nullable=False
    )
    member_name: Mapped[str] = mapped_column(String, nullable=False)
    numero_socio: Mapped[str] = mapped_column(String, nullable=False)
    visit_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    guests: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    titular_ingresado: Mapped[bool] = mapped_column(Boolean, default=False)
    titular_ingresado_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<DailyGuestList {self.numero_socio} {self.visit_date} ({len(self.guests or [])})>"


class BirthdayBooking(Base):
    """A member's yearly birthday event with its guest list."""

    __tablename__ = "birthday_bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("members.id"), index=True, nullable=False
    )
    member_name: Mapped[str] = mapped_column(String, nullable=False)
    numero_socio: Mapped[str] = mapped_column(String, nullable=False)
    event_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    year: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    guests: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        SAEnum(
            BookingStatus,
            name="birthday_booking_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=BookingStatus.APROBADA,
        nullable=False,
    )

    titular_ingresado: Mapped[bool] = mapped_column(Boolean, default=False)
    titular_ingresado_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<BirthdayBooking {self.numero_socio} {self.event_date} ({self.status.value})>"


class GuestPricing(Base):
    """Single-row price configuration."""

    __tablename__ = "guest_pricing"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    precio_invitado_diario: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    precio_invitado_cumpleanos: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    updated_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
