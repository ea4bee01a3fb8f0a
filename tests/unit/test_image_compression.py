"""Unit tests for upload-time image compression."""

from io import BytesIO

import pytest
from libs.common.config import get_settings
from libs.common.image_utils import compress_for_upload, compress_image
from PIL import Image


def _png(width: int, height: int) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", (width, height), (200, 30, 30, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.unit
def test_compress_image_downscales_longest_side_to_jpeg():
    compressed = compress_image(_png(3000, 1500), max_dimension=1280, quality=70)

    img = Image.open(BytesIO(compressed))
    assert img.format == "JPEG"
    assert img.size == (1280, 640)


@pytest.mark.unit
def test_compress_image_keeps_small_images_at_size():
    img = Image.open(BytesIO(compress_image(_png(200, 100))))

    assert img.size == (200, 100)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unreadable_image_is_uploaded_unchanged():
    data = b"definitely not an image"

    assert await compress_for_upload(data, get_settings()) == data
