"""Members Service schemas package.

Schema files:
  - schemas/member.py    Member, family group and adherent schemas
  - schemas/requests.py  Photo-change, medical review and dashboard schemas
"""

from services.members_service.schemas.member import (  # noqa: F401
    AdherentCreate,
    AdminMemberCreate,
    AdminMemberUpdate,
    AptoMedico,
    EmbeddedPersonResponse,
    FamilyChangeSubmit,
    FamilyMemberInput,
    FamilyOverlayEntry,
    FamilyOverviewResponse,
    MedicalStatusResponse,
    MemberCreate,
    MemberResponse,
    MemberStatusUpdate,
    MemberSummary,
    MemberUpdate,
    PendingAdherentResponse,
    PendingFamilyChangeResponse,
    RejectionPayload,
)
from services.members_service.schemas.requests import (  # noqa: F401
    DashboardResponse,
    MedicalReviewCreate,
    MedicalReviewResponse,
    PhotoChangeRequestResponse,
    ReconcileResponse,
)
