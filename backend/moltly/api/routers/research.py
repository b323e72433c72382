# backend/moltly/api/routers/research.py
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from moltly.api.deps import get_current_user
from moltly.api.records import owned_or_404, to_response
from moltly.db import get_db
from moltly.models.research_stack import ResearchStack
from moltly.models.user import User
from moltly.services.normalize.records import apply_patch, normalize_stack

router = APIRouter()


@router.get("")
@router.get("/")
def list_stacks(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    rows = (
        db.query(ResearchStack)
        .filter(ResearchStack.user_id == user.id)
        .order_by(ResearchStack.updated_at.desc(), ResearchStack.id.desc())
        .all()
    )
    return [to_response(r) for r in rows]


@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_stack(payload: dict = Body(...), db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    row = ResearchStack(user_id=user.id)
    row.apply_record(normalize_stack(payload).unwrap())
    db.add(row)
    db.commit()
    db.refresh(row)
    return to_response(row)


@router.patch("/{stack_id}")
def update_stack(
    stack_id: str,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    row = owned_or_404(db, ResearchStack, user.id, stack_id, label="Stack")
    row.apply_record(apply_patch(normalize_stack, row.to_record(), payload).unwrap())
    db.commit()
    db.refresh(row)
    return to_response(row)


@router.delete("/{stack_id}")
def delete_stack(stack_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    row = owned_or_404(db, ResearchStack, user.id, stack_id, label="Stack")
    db.delete(row)
    db.commit()
    return {"success": True}
