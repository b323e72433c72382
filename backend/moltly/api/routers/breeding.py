# backend/moltly/api/routers/breeding.py
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from moltly.api.deps import get_current_user
from moltly.api.records import owned_or_404, to_response
from moltly.db import get_db
from moltly.models.breeding_entry import BreedingEntry
from moltly.models.user import User
from moltly.services.normalize.records import apply_patch, normalize_breeding_entry

router = APIRouter()


@router.get("")
@router.get("/")
def list_breeding(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    rows = (
        db.query(BreedingEntry)
        .filter(BreedingEntry.user_id == user.id)
        .order_by(BreedingEntry.pairing_date.desc(), BreedingEntry.id.desc())
        .all()
    )
    return [to_response(r) for r in rows]


@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_breeding(payload: dict = Body(...), db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    row = BreedingEntry(user_id=user.id)
    row.apply_record(normalize_breeding_entry(payload).unwrap())
    db.add(row)
    db.commit()
    db.refresh(row)
    return to_response(row)


@router.patch("/{entry_id}")
def update_breeding(
    entry_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    row = owned_or_404(db, BreedingEntry, user.id, entry_id, label="Breeding entry")
    row.apply_record(apply_patch(normalize_breeding_entry, row.to_record(), payload).unwrap())
    db.commit()
    db.refresh(row)
    return to_response(row)


@router.delete("/{entry_id}")
def delete_breeding(entry_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    row = owned_or_404(db, BreedingEntry, user.id, entry_id, label="Breeding entry")
    db.delete(row)
    db.commit()
    return {"success": True}
