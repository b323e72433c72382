# backend/moltly/api/routers/health.py
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from moltly.api.deps import get_current_user
from moltly.api.records import owned_or_404, to_response
from moltly.db import get_db
from moltly.models.health_entry import HealthEntry
from moltly.models.user import User
from moltly.services.normalize.records import apply_patch, normalize_health_entry

router = APIRouter()


@router.get("")
@router.get("/")
def list_health(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    rows = (
        db.query(HealthEntry)
        .filter(HealthEntry.user_id == user.id)
        .order_by(HealthEntry.date.desc(), HealthEntry.id.desc())
        .all()
    )
    return [to_response(r) for r in rows]


@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_health(payload: dict = Body(...), db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    row = HealthEntry(user_id=user.id)
    row.apply_record(normalize_health_entry(payload).unwrap())
    db.add(row)
    db.commit()
    db.refresh(row)
    return to_response(row)


@router.patch("/{entry_id}")
def update_health(
    entry_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    row = owned_or_404(db, HealthEntry, user.id, entry_id, label="Health entry")
    row.apply_record(apply_patch(normalize_health_entry, row.to_record(), payload).unwrap())
    db.commit()
    db.refresh(row)
    return to_response(row)


@router.delete("/{entry_id}")
def delete_health(entry_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    row = owned_or_404(db, HealthEntry, user.id, entry_id, label="Health entry")
    db.delete(row)
    db.commit()
    return {"success": True}
