"""Medical fitness reviews."""

import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .enums import MedicalResult, PersonType, enum_values


class MedicalReview(Base):
    """One sign-off by medical staff. The latest review is copied onto the
    person's embedded ``apto_medico`` record."""

    __tablename__ = "medical_reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("members.id"), index=True, nullable=False
    )
    person_type: Mapped[PersonType] = mapped_column(
        SAEnum(
            PersonType,
            name="medical_person_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    person_dni: Mapped[str] = mapped_column(String, nullable=False)
    person_name: Mapped[str] = mapped_column(String, nullable=False)

    result: Mapped[MedicalResult] = mapped_column(
        SAEnum(
            MedicalResult,
            name="medical_result_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    review_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    observaciones: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[str] = mapped_column(String, nullable=False)
    reviewed_by_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    def __repr__(self):
        return f"<MedicalReview {self.person_dni} {self.result.value} {self.review_date}>"
