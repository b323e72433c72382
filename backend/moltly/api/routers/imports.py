# backend/moltly/api/routers/imports.py
import httpx
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from moltly.api.deps import get_current_user
from moltly.db import get_db
from moltly.models.user import User
from moltly.services.importer.reconcile import import_payload
from moltly.services.storage.fetch import get_http_client
from moltly.services.storage.store import AttachmentStore, LocalAttachmentStore, get_store, local_store

router = APIRouter()


@router.post("")
@router.post("/")
def import_data(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    store: AttachmentStore = Depends(get_store),
    http: httpx.Client = Depends(get_http_client),
    local: LocalAttachmentStore = Depends(local_store),
):
    report = import_payload(db, user.id, payload, store, http, local)
    return report.as_response()
