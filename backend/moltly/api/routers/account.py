# backend/moltly/api/routers/account.py
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from moltly.api.deps import get_current_user
from moltly.db import get_db
from moltly.models.breeding_entry import BreedingEntry
from moltly.models.health_entry import HealthEntry
from moltly.models.molt_entry import MoltEntry
from moltly.models.research_stack import ResearchStack
from moltly.models.user import User
from moltly.schemas.commons import WireModel
from moltly.services.auth.admin import is_admin
from moltly.services.auth.passwords import (
    hash_password,
    password_problem,
    username_problem,
    verify_password,
)
from moltly.services.storage.store import AttachmentStore, discard, get_store

logger = logging.getLogger(__name__)

router = APIRouter()


class PasswordChange(WireModel):
    current_password: str | None = None
    new_password: str | None = None
    username: str | None = None


@router.get("/password")
def password_status(user: User = Depends(get_current_user)):
    return {"hasPassword": bool(user.password_hash), "hasUsername": bool(user.username)}


@router.patch("/password")
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    problem = password_problem(payload.new_password)
    if problem:
        raise HTTPException(status_code=400, detail=problem)

    had_password = bool(user.password_hash)
    if not had_password:
        # a first password needs a username to sign in with
        username = user.username or (payload.username or "").strip().lower()
        if not username:
            raise HTTPException(status_code=400, detail="Username is required to add a password login.")
        problem = username_problem(username)
        if problem:
            raise HTTPException(status_code=400, detail=problem)
        owner = db.query(User).filter(User.username == username).first()
        if owner is not None and owner.id != user.id:
            raise HTTPException(status_code=409, detail="Username is already taken.")
        user.username = username
    else:
        if not payload.current_password:
            raise HTTPException(status_code=400, detail="Current password is required.")
        if not verify_password(payload.current_password, user.password_hash):
            raise HTTPException(status_code=400, detail="Current password is incorrect.")

    user.password_hash = hash_password(payload.new_password)
    db.commit()
    return {"success": True, "hasPassword": True, "mode": "updated" if had_password else "created"}


@router.delete("")
@router.delete("/")
def delete_account(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    store: AttachmentStore = Depends(get_store),
):
    urls = []
    for model in (MoltEntry, HealthEntry, BreedingEntry):
        for (attachments,) in db.query(model.attachments).filter(model.user_id == user.id):
            urls.extend(a.get("url") for a in attachments or [] if isinstance(a, dict))

    for model in (MoltEntry, HealthEntry, BreedingEntry, ResearchStack):
        db.query(model).filter(model.user_id == user.id).delete(synchronize_session=False)
    user_id = user.id
    db.delete(user)
    db.commit()

    discard(store, user_id, urls)
    logger.info("account deleted id=%s attachments=%s", user_id, len(urls))
    return {"success": True}


@router.get("/admin")
def admin_status(user: User = Depends(get_current_user)):
    return {"isAdmin": is_admin(user)}
