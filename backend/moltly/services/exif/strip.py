# backend/moltly/services/exif/strip.py
from io import BytesIO
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)

# extension -> (Pillow format, save options)
_ENCODERS = {
    "png": ("PNG", {}),
    "webp": ("WEBP", {"quality": 90}),
    "avif": ("AVIF", {"quality": 80}),
}
_JPEG = ("JPEG", {"quality": 90})


def strip_metadata(data: bytes, ext: str) -> bytes:
    """
    Re-encode an uploaded image without EXIF (GPS, camera, timestamps).
    Orientation is baked into the pixels first. GIFs pass through untouched;
    anything Pillow cannot decode is stored as uploaded.
    """
    if ext == "gif":
        return data
    fmt, options = _ENCODERS.get(ext, _JPEG)
    try:
        with Image.open(BytesIO(data)) as img:
            img = ImageOps.exif_transpose(img)
            if fmt == "JPEG" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            out = BytesIO()
            img.save(out, format=fmt, **options)
    except (UnidentifiedImageError, OSError, ValueError, KeyError) as exc:
        logger.warning("EXIF strip failed for .%s upload, keeping original: %s", ext, exc)
        return data
    return out.getvalue()
