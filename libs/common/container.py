"""Backend clients built once per app and injected into handlers."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from libs.common.config import Settings, get_settings
from libs.common.crypto import ImageCipher
from libs.common.search import AlgoliaSearchClient
from libs.common.storage import StorageService, SupabaseBlobStore


@dataclass
class ServiceContainer:
    settings: Settings
    cipher: ImageCipher
    storage: StorageService
    search: AlgoliaSearchClient


def build_container(settings: Optional[Settings] = None) -> ServiceContainer:
    settings = settings or get_settings()
    cipher = ImageCipher.from_settings(settings)
    storage = StorageService(
        backend=SupabaseBlobStore(
            url=settings.SUPABASE_URL,
            service_key=settings.SUPABASE_SERVICE_ROLE_KEY,
            bucket=settings.SUPABASE_STORAGE_BUCKET,
        ),
        cipher=cipher,
        public_base_url=settings.PUBLIC_API_URL,
    )
    search = AlgoliaSearchClient.from_settings(settings)
    return ServiceContainer(settings=settings, cipher=cipher, storage=storage, search=search)


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_storage(request: Request) -> StorageService:
    return get_container(request).storage


def get_search(request: Request) -> AlgoliaSearchClient:
    return get_container(request).search
