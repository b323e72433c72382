# backend/moltly/services/sync/wsca.py
"""
Mirrors molt-kind log entries to the WSCA webhook for users with a linked
Discord account. Runs as a FastAPI background task after the response;
failures are logged at DEBUG and dropped, there is no retry.

    created molt            -> POST   {discord_user_id, canonical, ...}
    molt edited             -> PUT    {discord_user_id, old: {...}, new: {...}}
    molt deleted / retyped  -> DELETE {discord_user_id, canonical, ...}
"""
from typing import Optional
import logging

import httpx
from fastapi import BackgroundTasks

from moltly.config import SyncSettings, wsca_sync_settings

logger = logging.getLogger(__name__)

SYNC_TIMEOUT = httpx.Timeout(10.0)


def _is_molt(record: Optional[dict]) -> bool:
    return bool(record) and record.get("entryType", "molt") == "molt"


def _key(record: dict, with_notes: bool = False) -> dict:
    out = {
        "canonical": record.get("species"),
        "specimen_name": record.get("specimen"),
        "date": record.get("date"),
        "stage": record.get("stage"),
    }
    if with_notes:
        out["notes"] = record.get("notes")
    return {k: v for k, v in out.items() if v is not None}


def build_sync_request(discord_id: str, before: Optional[dict], after: Optional[dict]):
    """(method, body) for a molt change, or None when nothing needs mirroring."""
    was, now = _is_molt(before), _is_molt(after)
    if was and not now:
        return "DELETE", {"discord_user_id": discord_id, **_key(before)}
    if now and not was:
        return "POST", {"discord_user_id": discord_id, **_key(after, with_notes=True)}
    if was and now:
        return "PUT", {
            "discord_user_id": discord_id,
            "old": _key(before),
            "new": _key(after, with_notes=True),
        }
    return None


def send_sync(settings: SyncSettings, method: str, body: dict, transport=None) -> None:
    try:
        with httpx.Client(timeout=SYNC_TIMEOUT, transport=transport) as client:
            res = client.request(
                method,
                settings.url,
                json=body,
                headers={"X-Sync-Secret": settings.secret},
            )
        logger.debug("wsca %s -> %s", method, res.status_code)
    except httpx.HTTPError as exc:
        logger.debug("wsca %s failed: %s", method, exc)


def schedule_molt_sync(
    background: BackgroundTasks,
    discord_id: Optional[str],
    before: Optional[dict],
    after: Optional[dict],
) -> bool:
    settings = wsca_sync_settings()
    if settings is None or not discord_id:
        return False
    request = build_sync_request(str(discord_id), before, after)
    if request is None:
        return False
    method, body = request
    background.add_task(send_sync, settings, method, body)
    return True
