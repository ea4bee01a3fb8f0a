"""Image compression applied before anything is stored."""

import asyncio
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from libs.common.config import Settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


def compress_image(image_data: bytes, max_dimension: int = 1280, quality: int = 70) -> bytes:
    """Downscale to ``max_dimension`` on the longest side and re-encode as JPEG."""
    img = Image.open(BytesIO(image_data))
    img = ImageOps.exif_transpose(img)
    img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buffer = BytesIO()
    img.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


async def compress_for_upload(image_data: bytes, settings: Settings) -> bytes:
    """
    Compress in a worker thread. On timeout or an unreadable image the
    original bytes are returned unchanged.
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(
                compress_image,
                image_data,
                settings.IMAGE_MAX_DIMENSION,
                settings.IMAGE_QUALITY,
            ),
            timeout=settings.IMAGE_COMPRESSION_TIMEOUT,
        )
    except asyncio.TimeoutError:
        logger.warning("Image compression timed out, uploading original")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(f"Image compression failed, uploading original: {e}")
    return image_data
