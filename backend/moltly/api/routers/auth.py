# backend/moltly/api/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from moltly.api.deps import get_login_limiter
from moltly.db import get_db
from moltly.models.user import User
from moltly.services.auth.passwords import hash_password, password_problem, verify_password
from moltly.services.auth.rate_limit import LoginRateLimiter
from moltly.services.auth.tokens import issue_token

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterIn(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None


class LoginIn(BaseModel):
    identifier: str | None = None  # email or username
    password: str | None = None


@router.post("/register", status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    email = (payload.email or "").strip().lower()
    if not email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required.")
    problem = password_problem(payload.password)
    if problem:
        raise HTTPException(status_code=400, detail=problem)
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="Email is already registered.")
    user = User(name=(payload.name or "").strip() or None, email=email, password_hash=hash_password(payload.password))
    db.add(user)
    db.commit()
    logger.info("user registered id=%s", user.id)
    return {"success": True}


@router.post("/login")
def login(
    payload: LoginIn,
    db: Session = Depends(get_db),
    limiter: LoginRateLimiter = Depends(get_login_limiter),
):
    identifier = (payload.identifier or "").strip().lower()
    if not identifier or not payload.password:
        raise HTTPException(status_code=400, detail="Identifier and password are required.")
    key = f"login:{identifier}"
    if limiter.is_locked(key):
        raise HTTPException(status_code=429, detail="Too many sign-in attempts. Please try again later.")

    user = db.query(User).filter((User.email == identifier) | (User.username == identifier)).first()
    if user is None or not verify_password(payload.password, user.password_hash):
        limiter.record_failure(key)
        logger.info("failed login for %s", identifier)
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    limiter.clear(key)
    return {"token": issue_token(user.id), "tokenType": "bearer", "userId": str(user.id)}
