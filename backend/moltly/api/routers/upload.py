# backend/moltly/api/routers/upload.py
from datetime import datetime, timezone
from typing import Optional
import logging
import uuid

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from moltly.api.deps import get_current_user
from moltly.models.user import User
from moltly.services.exif.strip import strip_metadata
from moltly.services.storage.media import ext_from_mime, ext_from_name, sanitize_filename
from moltly.services.storage.store import AttachmentStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@router.post("", status_code=201)
@router.post("/", status_code=201)
def upload_images(
    file: Optional[list[UploadFile]] = File(default=None),
    user: User = Depends(get_current_user),
    store: AttachmentStore = Depends(get_store),
):
    if not file:
        raise HTTPException(status_code=400, detail="No file provided")

    # validate the whole batch before anything is written
    pending = []
    for item in file:
        content_type = (item.content_type or "").strip()
        if not content_type.startswith("image/"):
            raise HTTPException(status_code=415, detail="Only image uploads are supported.")
        data = item.file.read(MAX_UPLOAD_BYTES + 1)
        if len(data) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=400, detail="File exceeds 10MB limit.")
        pending.append((item, content_type, data))

    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    attachments = []
    for item, content_type, data in pending:
        ext = ext_from_name(item.filename) or ext_from_mime(content_type)
        att_id = str(uuid.uuid4())
        body = strip_metadata(data, ext)
        url = store.put(user.id, f"{att_id}.{ext}", body, content_type or f"image/{ext}")
        attachments.append({
            "id": att_id,
            "name": sanitize_filename(item.filename or f"upload.{ext}"),
            "url": url,
            "type": content_type or f"image/{ext}",
            "addedAt": now,
        })
    logger.info("upload user=%s files=%s backend=%s", user.id, len(attachments), store.backend)
    return {"attachments": attachments}
