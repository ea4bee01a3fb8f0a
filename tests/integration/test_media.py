"""Integration tests for the media service upload and image proxy."""

from io import BytesIO

import pytest
from PIL import Image
from tests.conftest import make_member_user, make_staff_user, override_auth
from tests.factories import MemberFactory


def _jpeg_bytes(size=(2400, 1600)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color=(200, 40, 40)).save(buffer, format="JPEG")
    return buffer.getvalue()


async def _signed_up_user(db_session):
    user = make_member_user()
    member = MemberFactory.create(auth_id=user.user_id)
    db_session.add(member)
    await db_session.commit()
    return user, member


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_to_own_folder_is_encrypted_and_compressed(
    media_client, db_session, blob_store, test_container
):
    user, member = await _signed_up_user(db_session)
    original = _jpeg_bytes()

    from services.media_service.app.main import app

    with override_auth(app, user):
        response = await media_client.post(
            "/media/images",
            data={"path": f"socios/{member.id}/foto_perfil.jpg"},
            files={"file": ("foto.jpg", original, "image/jpeg")},
        )

    assert response.status_code == 201, response.text
    path = response.json()["path"]
    assert response.json()["download_url"].endswith(f"/media/images/{path}")
    assert blob_store.objects[path] != original

    stored = await test_container.storage.get(path)
    with Image.open(BytesIO(stored)) as img:
        assert max(img.size) <= test_container.settings.IMAGE_MAX_DIMENSION


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_to_someone_elses_folder_is_forbidden(media_client, db_session):
    user, _ = await _signed_up_user(db_session)
    other = MemberFactory.create()
    db_session.add(other)
    await db_session.commit()

    from services.media_service.app.main import app

    with override_auth(app, user):
        response = await media_client.post(
            "/media/images",
            data={"path": f"socios/{other.id}/foto_perfil.jpg"},
            files={"file": ("foto.jpg", b"img", "image/jpeg")},
        )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_before_signup_uses_auth_id_folder(media_client, db_session):
    user = make_member_user()

    from services.media_service.app.main import app

    with override_auth(app, user):
        response = await media_client.post(
            "/media/images",
            data={"path": f"socios/{user.user_id}/foto_dni_frente.jpg"},
            files={"file": ("dni.jpg", b"img", "image/jpeg")},
        )

    assert response.status_code == 201, response.text


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_rejects_non_images_and_bad_paths(media_client, db_session):
    user, member = await _signed_up_user(db_session)

    from services.media_service.app.main import app

    with override_auth(app, user):
        not_image = await media_client.post(
            "/media/images",
            data={"path": f"socios/{member.id}/doc.pdf"},
            files={"file": ("doc.pdf", b"%PDF", "application/pdf")},
        )
        traversal = await media_client.post(
            "/media/images",
            data={"path": f"socios/{member.id}/../../secret.jpg"},
            files={"file": ("foto.jpg", b"img", "image/jpeg")},
        )

    assert not_image.status_code == 400
    assert traversal.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_proxy_returns_plaintext_with_cache_header(media_client, db_session, test_container):
    user, member = await _signed_up_user(db_session)
    path = f"socios/{member.id}/foto_carnet.jpg"
    await test_container.storage.put(path, b"plain-image")

    from services.media_service.app.main import app

    with override_auth(app, user):
        response = await media_client.get(f"/media/images/{path}")

    assert response.status_code == 200
    assert response.content == b"plain-image"
    assert response.headers["content-type"] == "image/jpeg"
    assert "immutable" in response.headers["cache-control"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_proxy_access_rules(media_client, db_session, test_container):
    user, _ = await _signed_up_user(db_session)
    other = MemberFactory.create()
    db_session.add(other)
    await db_session.commit()
    path = f"socios/{other.id}/foto_perfil.jpg"
    await test_container.storage.put(path, b"other-image")
    gate = await make_staff_user(db_session, role="portero")

    from services.media_service.app.main import app

    with override_auth(app, user):
        denied = await media_client.get(f"/media/images/{path}")
    with override_auth(app, gate):
        allowed = await media_client.get(f"/media/images/{path}")
        missing = await media_client.get(f"/media/images/socios/{other.id}/nada.jpg")

    assert denied.status_code == 403
    assert allowed.content == b"other-image"
    assert missing.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_proxy_requires_authentication(media_client):
    response = await media_client.get("/media/images/socios/x/foto.jpg")

    assert response.status_code == 401
