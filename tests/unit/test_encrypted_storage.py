"""Unit tests for the encrypting storage facade and the image cipher."""

import pytest
from libs.common.crypto import ImageCipher, ImageDecryptionError
from libs.common.error_handler import DownstreamServiceError
from libs.common.storage import StorageService
from tests.stubs import TEST_KEY_HEX, InMemoryBlobStore


def _storage(blob_store: InMemoryBlobStore) -> StorageService:
    return StorageService(
        backend=blob_store,
        cipher=ImageCipher(bytes.fromhex(TEST_KEY_HEX)),
        public_base_url="http://test/",
    )


@pytest.mark.unit
def test_cipher_rejects_tampered_ciphertext():
    cipher = ImageCipher(bytes.fromhex(TEST_KEY_HEX))
    blob = bytearray(cipher.encrypt(b"jpeg bytes"))
    blob[-1] ^= 0x01

    with pytest.raises(ImageDecryptionError):
        cipher.decrypt(bytes(blob))


@pytest.mark.unit
def test_cipher_rejects_other_key():
    blob = ImageCipher(bytes.fromhex(TEST_KEY_HEX)).encrypt(b"jpeg bytes")

    with pytest.raises(ImageDecryptionError):
        ImageCipher(bytes.fromhex("b2" * 32)).decrypt(blob)


@pytest.mark.unit
def test_cipher_requires_32_byte_key():
    with pytest.raises(ValueError):
        ImageCipher(b"short")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_put_stores_only_ciphertext():
    blob_store = InMemoryBlobStore()
    storage = _storage(blob_store)

    url = await storage.put("socios/abc/foto_perfil.jpg", b"plain image")

    assert url == "http://test/media/images/socios/abc/foto_perfil.jpg"
    stored = blob_store.objects["socios/abc/foto_perfil.jpg"]
    assert b"plain image" not in stored
    assert await storage.get("socios/abc/foto_perfil.jpg") == b"plain image"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_missing_object_returns_none():
    storage = _storage(InMemoryBlobStore())

    assert await storage.get("socios/missing.jpg") is None
    assert await storage.exists("socios/missing.jpg") is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_get_plaintext_object_fails_loudly():
    """Objects written around the facade cannot be served."""
    blob_store = InMemoryBlobStore()
    blob_store.objects["socios/raw.jpg"] = b"not encrypted"
    storage = _storage(blob_store)

    with pytest.raises(DownstreamServiceError):
        await storage.get("socios/raw.jpg")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_copy_reencrypts_under_new_path():
    blob_store = InMemoryBlobStore()
    storage = _storage(blob_store)
    await storage.put("solicitudes-temp/m1/1_foto.jpg", b"image")

    await storage.copy("solicitudes-temp/m1/1_foto.jpg", "socios/m1/foto_perfil_x.jpg")

    assert await storage.get("socios/m1/foto_perfil_x.jpg") == b"image"
    assert "solicitudes-temp/m1/1_foto.jpg" in blob_store.objects


@pytest.mark.unit
def test_path_from_url_understands_proxy_and_legacy_urls():
    storage = _storage(InMemoryBlobStore())

    assert storage.path_from_url("http://test/media/images/socios/a%20b/f.jpg") == "socios/a b/f.jpg"
    assert (
        storage.path_from_url(
            "https://x.supabase.co/storage/v1/object/public/test-bucket/socios/m/f.jpg"
        )
        == "socios/m/f.jpg"
    )
    assert (
        storage.path_from_url(
            "https://firebasestorage.googleapis.com/v0/b/app/o/socios%2Fm%2Ff.jpg?alt=media"
        )
        == "socios/m/f.jpg"
    )
    assert storage.path_from_url(None) is None
