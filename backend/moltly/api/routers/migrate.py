# backend/moltly/api/routers/migrate.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from moltly.api.deps import get_current_user
from moltly.db import get_db
from moltly.models.user import User
from moltly.services.storage.migrate import migrate_local_uploads
from moltly.services.storage.store import AttachmentStore, S3AttachmentStore, get_store, local_store

router = APIRouter()


@router.post("")
@router.post("/")
def migrate_uploads(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    store: AttachmentStore = Depends(get_store),
):
    if not isinstance(store, S3AttachmentStore):
        raise HTTPException(status_code=400, detail="S3 is not configured")
    return migrate_local_uploads(db, user.id, local_store(), store).as_response()
