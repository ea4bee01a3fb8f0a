from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import STAFF_ROLES, AuthUser, Principal, Role
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.members_service.models import AdminUser, Member

settings = get_settings()
logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> AuthUser:
    """
    Validate Supabase JWT and return the authenticated user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if token is None:
        raise credentials_exception

    try:
        # Supabase signs access tokens with HS256; audience varies by client
        payload = jwt.decode(
            token.credentials,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            options={"verify_aud": False},
        )
        return AuthUser(**payload)
    except (JWTError, ValidationError):
        raise credentials_exception


async def resolve_role(db: AsyncSession, auth_id: str) -> tuple[Optional[Role], Optional[str]]:
    """
    Map an identity to exactly one role.

    Staff records in ``admin_users`` win; otherwise a member record makes the
    identity a socio. Returns (role, display name), or (None, None).
    """
    result = await db.execute(select(AdminUser).where(AdminUser.auth_id == auth_id))
    admin_user = result.scalar_one_or_none()
    if admin_user is not None:
        try:
            return Role(admin_user.role), admin_user.display_name
        except ValueError:
            # Unknown staff roles fall back to the member lookup.
            logger.warning(f"Unknown role {admin_user.role!r} for auth id {auth_id}")

    result = await db.execute(select(Member).where(Member.auth_id == auth_id))
    member = result.scalar_one_or_none()
    if member is not None:
        return Role.SOCIO, member.full_name

    return None, None


async def get_current_principal(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_async_db)],
) -> Principal:
    role, display_name = await resolve_role(db, current_user.user_id)
    return Principal(user=current_user, role=role, display_name=display_name)


def require_roles(*roles: Role):
    """Dependency factory: 403 unless the caller holds one of ``roles``."""
    allowed = set(roles)

    async def _require(
        principal: Annotated[Principal, Depends(get_current_principal)]
    ) -> Principal:
        if principal.role not in allowed:
            logger.warning(
                f"Role {principal.role} denied, requires one of {sorted(r.value for r in allowed)}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient privileges",
            )
        return principal

    return _require


require_admin = require_roles(Role.ADMIN)
require_medical = require_roles(Role.ADMIN, Role.MEDICO)
require_staff = require_roles(*STAFF_ROLES)


async def get_current_member(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_async_db)],
) -> Member:
    """Resolve the caller's own member record, 404 if they have none."""
    result = await db.execute(select(Member).where(Member.auth_id == current_user.user_id))
    member = result.scalar_one_or_none()
    if not member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Member profile not found",
        )
    return member
