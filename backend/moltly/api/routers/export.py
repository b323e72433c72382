# backend/moltly/api/routers/export.py
from datetime import datetime, timezone
import json

import httpx
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from moltly.api.deps import get_current_user
from moltly.db import get_db
from moltly.models.user import User
from moltly.services.export.assemble import assemble_export
from moltly.services.storage.fetch import get_http_client
from moltly.services.storage.store import LocalAttachmentStore, local_store

router = APIRouter()


@router.get("")
@router.get("/")
def export_data(
    embed: str = "1",
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    http: httpx.Client = Depends(get_http_client),
    local: LocalAttachmentStore = Depends(local_store),
):
    envelope = assemble_export(db, user.id, embed != "0", http, local)
    filename = f"moltly-export-{datetime.now(timezone.utc):%Y-%m-%d}.json"
    headers = {
        "Content-Disposition": f"attachment; filename=\"{filename}\"",
        "Cache-Control": "no-store",
    }
    return Response(
        content=json.dumps(envelope, ensure_ascii=False, indent=2),
        media_type="application/json",
        headers=headers,
    )
