"""Gate access log and per-day entry counters."""

import enum
import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONType
from sqlalchemy import Date, DateTime, Enum as SAEnum, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from services.members_service.models.enums import PersonType, enum_values


class AccessDirection(str, enum.Enum):
    ENTRADA = "entrada"
    SALIDA = "salida"


def empty_breakdown() -> dict:
    return {person_type.value: 0 for person_type in PersonType}


class AccessLog(Base):
    """One recorded entry or exit at the gate."""

    __tablename__ = "access_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    person_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    person_type: Mapped[PersonType] = mapped_column(
        SAEnum(
            PersonType,
            name="access_person_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    member_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, index=True, nullable=True)
    nombre: Mapped[str] = mapped_column(String, nullable=False)
    dni: Mapped[str] = mapped_column(String, index=True, nullable=False)
    direction: Mapped[AccessDirection] = mapped_column(
        SAEnum(
            AccessDirection,
            name="access_direction_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=AccessDirection.ENTRADA,
        nullable=False,
    )
    access_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    recorded_by: Mapped[str] = mapped_column(String, nullable=False)
    recorded_by_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    def __repr__(self):
        return f"<AccessLog {self.dni} {self.direction.value} {self.recorded_at}>"


class DailyEntryStats(Base):
    """Entry counters for one day, broken down by person type."""

    __tablename__ = "daily_entry_stats"

    stats_date: Mapped[date] = mapped_column(Date, primary_key=True)
    total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    breakdown: Mapped[dict] = mapped_column(JSONType, default=empty_breakdown, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
