# backend/moltly/api/records.py
"""Ownership-scoped row access shared by the record routers."""
from fastapi import HTTPException
from sqlalchemy.orm import Session


def parse_id(raw: str):
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def owned_or_404(db: Session, model, user_id: int, raw_id: str, label: str = "Entry"):
    # the user filter is part of the lookup, so another user's id is a plain miss
    record_id = parse_id(raw_id)
    row = None
    if record_id is not None:
        row = db.query(model).filter(model.id == record_id, model.user_id == user_id).first()
    if row is None:
        raise HTTPException(status_code=404, detail=f"{label} not found.")
    return row


def to_response(row) -> dict:
    out = row.to_record()
    out["userId"] = str(row.user_id)
    return out
