# backend/moltly/api/routers/logs.py
import logging

from fastapi import APIRouter, BackgroundTasks, Body, Depends
from sqlalchemy.orm import Session

from moltly.api.deps import get_current_user
from moltly.api.records import owned_or_404, to_response
from moltly.db import get_db
from moltly.models.molt_entry import MoltEntry
from moltly.models.user import User
from moltly.services.normalize.records import apply_patch, normalize_molt_entry
from moltly.services.sync.wsca import schedule_molt_sync

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
@router.get("/")
def list_entries(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    rows = (
        db.query(MoltEntry)
        .filter(MoltEntry.user_id == user.id)
        .order_by(MoltEntry.date.desc(), MoltEntry.id.desc())
        .all()
    )
    return [to_response(r) for r in rows]


@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_entry(
    background: BackgroundTasks,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    record = normalize_molt_entry(payload).unwrap()
    row = MoltEntry(user_id=user.id)
    row.apply_record(record)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("molt entry created id=%s user=%s type=%s", row.id, user.id, row.entry_type)
    schedule_molt_sync(background, user.discord_id, None, record)
    return to_response(row)


@router.patch("/{entry_id}")
def update_entry(
    entry_id: str,
    background: BackgroundTasks,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    row = owned_or_404(db, MoltEntry, user.id, entry_id)
    before = row.to_record()
    record = apply_patch(normalize_molt_entry, before, payload).unwrap()
    row.apply_record(record)
    db.commit()
    db.refresh(row)
    schedule_molt_sync(background, user.discord_id, before, record)
    return to_response(row)


@router.delete("/{entry_id}")
def delete_entry(
    entry_id: str,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    row = owned_or_404(db, MoltEntry, user.id, entry_id)
    before = row.to_record()
    # attachments stay in storage; orphans are not reclaimed here
    db.delete(row)
    db.commit()
    schedule_molt_sync(background, user.discord_id, before, None)
    return {"success": True}
