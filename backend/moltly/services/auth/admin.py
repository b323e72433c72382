# backend/moltly/services/auth/admin.py
from moltly.config import admin_discord_ids, admin_emails


def is_admin(user) -> bool:
    """Allow-listed by email (case-insensitive) or linked Discord id."""
    if user.email and user.email.lower() in admin_emails():
        return True
    return bool(user.discord_id) and str(user.discord_id) in admin_discord_ids()
