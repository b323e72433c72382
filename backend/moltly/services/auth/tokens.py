# backend/moltly/services/auth/tokens.py
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

import jwt

from moltly.config import session_secret, session_ttl_seconds

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def issue_token(user_id: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(seconds=session_ttl_seconds()),
    }
    return jwt.encode(payload, session_secret(), algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[int]:
    """User id carried by a valid session token, None otherwise."""
    try:
        payload = jwt.decode(token, session_secret(), algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("session token expired")
        return None
    except jwt.InvalidTokenError as exc:
        logger.warning("invalid session token: %s", type(exc).__name__)
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None
