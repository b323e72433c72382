# backend/moltly/services/storage/media.py
from pathlib import PurePosixPath
from typing import Optional, Tuple
import base64
import binascii
import re

_DATA_URL = re.compile(r"^data:([^;,]+);base64,(.*)$", re.DOTALL)

MIME_TO_EXT = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/heic": "heic",
    "image/heif": "heif",
    "image/avif": "avif",
}

EXT_TO_MIME = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "heic": "image/heic",
    "heif": "image/heif",
    "avif": "image/avif",
}


def parse_data_url(data_url: str) -> Optional[Tuple[str, bytes]]:
    """(mime, bytes) for a base64 data URL, None when it is not one."""
    m = _DATA_URL.match(data_url.strip())
    if not m:
        return None
    try:
        return m.group(1), base64.b64decode(m.group(2), validate=False)
    except (binascii.Error, ValueError):
        return None


def to_data_url(mime: str, data: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def ext_from_mime(mime: Optional[str]) -> str:
    if not mime:
        return "jpg"
    return MIME_TO_EXT.get(mime.split(";")[0].strip().lower(), "jpg")


def ext_from_name(name: Optional[str]) -> Optional[str]:
    suffix = PurePosixPath(name or "").suffix.lstrip(".").lower()
    return suffix or None


def mime_from_name(name: Optional[str]) -> Optional[str]:
    ext = ext_from_name(name)
    return EXT_TO_MIME.get(ext) if ext else None


def sanitize_filename(name: str) -> str:
    base = re.sub(r"[\\/]", " ", name).strip()
    return re.sub(r"[^a-zA-Z0-9._-]", "_", base)
