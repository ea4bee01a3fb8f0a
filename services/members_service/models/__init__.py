"""Members Service models package.

Re-exports all models and enums so that:
  - ``from services.members_service.models import Member`` works
  - Alembic env.py sees every table on import

Model definitions are split across:
  - models/member.py         Member, AdminUser, Counter
  - models/photo_request.py  PhotoChangeRequest
  - models/medical.py        MedicalReview
"""

from services.members_service.models.enums import (  # noqa: F401
    AdherentRequestStatus,
    AdherentStatus,
    ApprovalState,
    FamilyGroupType,
    MedicalResult,
    MedicalStatus,
    MemberStatus,
    PersonType,
    PhotoRequestStatus,
    PhotoSlot,
    Relationship,
)
from services.members_service.models.medical import MedicalReview  # noqa: F401
from services.members_service.models.member import (  # noqa: F401
    AdminUser,
    Counter,
    Member,
)
from services.members_service.models.photo_request import (  # noqa: F401
    PhotoChangeRequest,
)

__all__ = [
    "AdherentRequestStatus",
    "AdherentStatus",
    "AdminUser",
    "ApprovalState",
    "Counter",
    "FamilyGroupType",
    "MedicalResult",
    "MedicalReview",
    "MedicalStatus",
    "Member",
    "MemberStatus",
    "PersonType",
    "PhotoChangeRequest",
    "PhotoRequestStatus",
    "PhotoSlot",
    "Relationship",
]
