# backend/moltly/services/auth/passwords.py
import re

import bcrypt

from moltly.config import bcrypt_rounds

USERNAME_PATTERN = re.compile(r"^[a-z0-9]{2,32}$")
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def password_problem(password) -> str | None:
    """Human-readable reason a new password is refused, or None."""
    if not isinstance(password, str) or not password:
        return "New password is required."
    if len(password) < 8 or not re.search(r"[a-zA-Z]", password) or not re.search(r"[0-9]", password):
        return "Password must be at least 8 characters and include letters and numbers."
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return "Password must be at most 72 bytes."
    return None


def username_problem(username: str) -> str | None:
    if not USERNAME_PATTERN.match(username):
        return "Username must be 2-32 characters and use letters or numbers only."
    return None


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=bcrypt_rounds())
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed or not isinstance(password, str):
        return False
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("ascii"))
    except ValueError:
        return False
