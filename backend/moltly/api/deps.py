# backend/moltly/api/deps.py
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from moltly.db import get_db
from moltly.models.user import User
from moltly.services.auth.rate_limit import LoginRateLimiter
from moltly.services.auth.tokens import decode_token


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve ``Authorization: Bearer <token>`` to the signed-in user or 401."""
    if not authorization:
        raise _unauthorized("Unauthorized")
    if not authorization.startswith("Bearer "):
        raise _unauthorized("Invalid authorization header format")
    user_id = decode_token(authorization[7:])
    if user_id is None:
        raise _unauthorized("Invalid or expired token")
    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("Unauthorized")
    return user


def get_login_limiter(request: Request) -> LoginRateLimiter:
    return request.app.state.login_limiter
