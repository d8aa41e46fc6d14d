"""Optional image codecs and HEIC/HEIF transcoding."""

import io
import logging
import re

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

_HEIF_REGISTERED = False

HEIC_PATTERN = re.compile(r"hei[cf]", re.IGNORECASE)


def register_optional_image_codecs() -> None:
    """Teach Pillow to open HEIC/HEIF files via pillow-heif."""
    global _HEIF_REGISTERED
    if _HEIF_REGISTERED:
        return
    from pillow_heif import register_heif_opener

    register_heif_opener()
    _HEIF_REGISTERED = True


def is_heic(content_type: str | None, filename: str | None) -> bool:
    """True when the declared MIME type or the file extension names HEIC/HEIF."""
    if content_type and HEIC_PATTERN.search(content_type):
        return True
    if filename and "." in filename:
        return bool(HEIC_PATTERN.fullmatch(filename.rsplit(".", 1)[1]))
    return False


def transcode_to_jpeg(data: bytes, quality: int = 90) -> bytes:
    """Decode ``data`` with Pillow and re-encode it as JPEG.

    Raises whatever Pillow raises for undecodable input.
    """
    register_optional_image_codecs()
    with Image.open(io.BytesIO(data)) as img:
        img = ImageOps.exif_transpose(img)
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        out = io.BytesIO()
        img.save(out, format="JPEG", quality=quality)
    return out.getvalue()
