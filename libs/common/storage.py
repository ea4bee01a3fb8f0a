"""Encrypted object storage.

Every read and write of member images goes through ``StorageService``:
objects are encrypted before upload and decrypted after download, so no
call site decides on its own whether a file is protected.
"""

import asyncio
import mimetypes
from typing import Optional, Protocol
from urllib.parse import quote, unquote, urlparse

from supabase import Client, create_client

from libs.common.crypto import ImageCipher, ImageDecryptionError
from libs.common.error_handler import DownstreamServiceError
from libs.common.logging import get_logger

logger = get_logger(__name__)

IMAGE_PROXY_PREFIX = "/media/images/"
ENCRYPTED_CONTENT_TYPE = "application/octet-stream"


class BlobStore(Protocol):
    """Raw path-addressed blob operations."""

    async def upload(self, path: str, data: bytes, content_type: str) -> None: ...

    async def download(self, path: str) -> Optional[bytes]: ...

    async def remove(self, paths: list[str]) -> None: ...


class SupabaseBlobStore:
    """Blob operations against a Supabase Storage bucket."""

    def __init__(self, url: str, service_key: str, bucket: str):
        self._url = url
        self._service_key = service_key
        self.bucket = bucket
        self._client: Optional[Client] = None

    @property
    def client(self) -> Client:
        # Created on first use so apps can start without reachable credentials.
        if self._client is None:
            self._client = create_client(self._url, self._service_key)
        return self._client

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        def _upload():
            self.client.storage.from_(self.bucket).upload(
                path=path,
                file=data,
                file_options={"content-type": content_type, "upsert": "true"},
            )

        try:
            await asyncio.to_thread(_upload)
        except Exception as e:
            raise DownstreamServiceError("storage", f"upload of {path} failed: {e}") from e

    async def download(self, path: str) -> Optional[bytes]:
        def _download() -> bytes:
            return self.client.storage.from_(self.bucket).download(path)

        try:
            return await asyncio.to_thread(_download)
        except Exception as e:
            if "not found" in str(e).lower() or "404" in str(e):
                return None
            raise DownstreamServiceError("storage", f"download of {path} failed: {e}") from e

    async def remove(self, paths: list[str]) -> None:
        def _remove():
            self.client.storage.from_(self.bucket).remove(paths)

        try:
            await asyncio.to_thread(_remove)
        except Exception as e:
            raise DownstreamServiceError("storage", f"delete of {paths} failed: {e}") from e


class StorageService:
    """Encrypting facade over a ``BlobStore``."""

    def __init__(self, backend: BlobStore, cipher: ImageCipher, public_base_url: str):
        self.backend = backend
        self.cipher = cipher
        self.public_base_url = public_base_url.rstrip("/")

    async def put(self, path: str, data: bytes) -> str:
        """Encrypt and store ``data`` at ``path``. Returns the stable URL."""
        await self.backend.upload(path, self.cipher.encrypt(data), ENCRYPTED_CONTENT_TYPE)
        logger.info(f"Stored encrypted object at {path}")
        return self.url_for(path)

    async def get(self, path: str) -> Optional[bytes]:
        """Fetch and decrypt the object at ``path``, or None when missing."""
        blob = await self.backend.download(path)
        if blob is None:
            return None
        try:
            return self.cipher.decrypt(blob)
        except ImageDecryptionError as e:
            raise DownstreamServiceError("storage", f"cannot decrypt {path}: {e}") from e

    async def exists(self, path: str) -> bool:
        return await self.backend.download(path) is not None

    async def delete(self, path: str) -> None:
        await self.backend.remove([path])
        logger.info(f"Deleted object at {path}")

    async def copy(self, source_path: str, dest_path: str) -> str:
        data = await self.get(source_path)
        if data is None:
            raise DownstreamServiceError("storage", f"source object {source_path} is missing")
        return await self.put(dest_path, data)

    def url_for(self, path: str) -> str:
        return f"{self.public_base_url}{IMAGE_PROXY_PREFIX}{quote(path)}"

    def path_from_url(self, url: Optional[str]) -> Optional[str]:
        """
        Recover the storage path from a URL we handed out.

        Understands proxy URLs, Supabase public object URLs and legacy
        Firebase download URLs (``/o/<encoded path>``).
        """
        if not url:
            return None
        parsed = urlparse(url)
        url_path = parsed.path

        if IMAGE_PROXY_PREFIX in url_path:
            return unquote(url_path.split(IMAGE_PROXY_PREFIX, 1)[1])

        bucket = getattr(self.backend, "bucket", None)
        if bucket and f"/{bucket}/" in url_path:
            return unquote(url_path.split(f"/{bucket}/", 1)[1])

        if "/o/" in url_path:
            return unquote(url_path.split("/o/", 1)[1])

        return None


def guess_content_type(path: str) -> str:
    content_type, _ = mimetypes.guess_type(path)
    return content_type or "image/jpeg"
