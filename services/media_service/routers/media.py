"""Encrypted image upload and the decrypting image proxy."""

import posixpath
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from libs.auth.dependencies import get_current_principal
from libs.auth.models import STAFF_ROLES, Principal
from libs.common.config import get_settings
from libs.common.container import get_storage
from libs.common.image_utils import compress_for_upload
from libs.common.logging import get_logger
from libs.common.storage import StorageService, guess_content_type
from libs.db.session import get_async_db
from pydantic import BaseModel
from services.members_service.models import Member
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
settings = get_settings()
router = APIRouter(prefix="/media", tags=["media"])

OWNED_PREFIXES = ("socios", "solicitudes-temp")
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
IMAGE_CACHE_CONTROL = "private, max-age=31536000, immutable"


class UploadResponse(BaseModel):
    download_url: str
    path: str


def normalize_storage_path(path: str) -> str:
    """Reject absolute paths and parent-directory segments."""
    cleaned = (path or "").strip()
    normalized = posixpath.normpath(cleaned)
    if (
        not cleaned
        or cleaned.startswith("/")
        or normalized.startswith("..")
        or "/../" in f"/{cleaned}/"
        or normalized == "."
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid storage path",
        )
    return normalized


async def _owner_keys(db: AsyncSession, principal: Principal) -> set[str]:
    """Folder keys a member may use: their auth id and, once signed up, their member id."""
    keys = {principal.user_id}
    result = await db.execute(select(Member.id).where(Member.auth_id == principal.user_id))
    member_id = result.scalar_one_or_none()
    if member_id is not None:
        keys.add(str(member_id))
    return keys


def _owns(path: str, keys: set[str]) -> bool:
    parts = path.split("/")
    return len(parts) >= 3 and parts[0] in OWNED_PREFIXES and parts[1] in keys


@router.post("/images", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    path: str = Form(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Compress, encrypt and store an image.

    Admins may write anywhere. Everyone else is limited to their own
    ``socios/<id>/`` and ``solicitudes-temp/<id>/`` folders.
    """
    path = normalize_storage_path(path)
    if not principal.is_admin and not _owns(path, await _owner_keys(db, principal)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only upload to your own folders",
        )

    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="File must be an image")
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="File is empty")
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="File must not exceed 5MB")

    data = await compress_for_upload(data, settings)
    download_url = await storage.put(path, data)
    logger.info(f"Image uploaded to {path} by {principal.user_id}")
    return UploadResponse(download_url=download_url, path=path)


@router.get("/images/{path:path}")
async def get_image(
    path: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_db),
    storage: StorageService = Depends(get_storage),
):
    """Decrypt and return a stored image."""
    path = normalize_storage_path(path)
    if principal.role not in STAFF_ROLES and not _owns(path, await _owner_keys(db, principal)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view this image",
        )

    data: Optional[bytes] = await storage.get(path)
    if data is None:
        raise HTTPException(status_code=404, detail="Image not found")

    return Response(
        content=data,
        media_type=guess_content_type(path),
        headers={"Cache-Control": IMAGE_CACHE_CONTROL},
    )
