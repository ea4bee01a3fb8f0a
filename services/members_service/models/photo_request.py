"""Photo-change requests awaiting admin review."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .enums import PersonType, PhotoRequestStatus, PhotoSlot, enum_values


class PhotoChangeRequest(Base):
    """A proposed replacement for one photo slot of one person.

    ``staged_path`` is set between the two approval phases: the image has been
    copied to its permanent location but the member record is not patched yet.
    """

    __tablename__ = "photo_change_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("members.id"), index=True, nullable=False
    )
    member_name: Mapped[str] = mapped_column(String, nullable=False)
    numero_socio: Mapped[str] = mapped_column(String, nullable=False)

    # Target
    person_type: Mapped[PersonType] = mapped_column(
        SAEnum(
            PersonType,
            name="photo_person_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    person_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    person_name: Mapped[str] = mapped_column(String, nullable=False)
    slot: Mapped[PhotoSlot] = mapped_column(
        SAEnum(
            PhotoSlot,
            name="photo_slot_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )

    # Images
    current_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    new_url: Mapped[str] = mapped_column(String, nullable=False)
    temp_path: Mapped[str] = mapped_column(String, nullable=False)
    staged_path: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    staged_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Decision
    status: Mapped[PhotoRequestStatus] = mapped_column(
        SAEnum(
            PhotoRequestStatus,
            name="photo_request_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PhotoRequestStatus.PENDIENTE,
        nullable=False,
        index=True,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    decided_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    decided_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    requested_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    @property
    def is_decided(self) -> bool:
        return self.status != PhotoRequestStatus.PENDIENTE

    def __repr__(self):
        return f"<PhotoChangeRequest {self.id} {self.slot.value} ({self.status.value})>"
