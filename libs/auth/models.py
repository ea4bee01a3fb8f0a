import enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class Role(str, enum.Enum):
    """The four roles a signed-in identity can hold."""

    SOCIO = "socio"
    ADMIN = "admin"
    MEDICO = "medico"
    PORTERO = "portero"


STAFF_ROLES = (Role.ADMIN, Role.MEDICO, Role.PORTERO)


class AuthUser(BaseModel):
    """
    Represents an authenticated user from Supabase.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: str = "authenticated"

    model_config = {"populate_by_name": True}


class Principal(BaseModel):
    """An authenticated identity together with its resolved club role."""

    user: AuthUser
    role: Optional[Role] = None
    display_name: Optional[str] = None

    @property
    def user_id(self) -> str:
        return self.user.user_id

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
