# backend/moltly/services/export/assemble.py
"""
Builds the export envelope for one user:

    {version, exportedAt, entries[], research[], health[], breeding[]}

Collections are ordered newest first (id breaks ties) so exporting unchanged
data twice differs only in timestamps. With embed_attachments each attachment
gains a ``dataUrl`` carrying its bytes; an attachment that cannot be read is
exported without one. Nothing persisted is modified.
"""
from typing import Optional
import logging

import httpx
from sqlalchemy.orm import Session

from moltly.errors import StorageError
from moltly.models.base import iso_utc, utcnow
from moltly.models.breeding_entry import BreedingEntry
from moltly.models.health_entry import HealthEntry
from moltly.models.molt_entry import MoltEntry
from moltly.models.research_stack import ResearchStack
from moltly.services.storage.fetch import fetch_remote
from moltly.services.storage.media import mime_from_name, to_data_url
from moltly.services.storage.store import LocalAttachmentStore, is_local_url

logger = logging.getLogger(__name__)

EXPORT_VERSION = 2


def _mime_for(att: dict, header: Optional[str] = None) -> str:
    if att.get("type"):
        return att["type"]
    if header:
        return header.split(";")[0].strip()
    return mime_from_name(att.get("name")) or mime_from_name(att.get("url")) or "application/octet-stream"


def embed_data_url(att: dict, owner_id, http: httpx.Client, local: LocalAttachmentStore) -> dict:
    url = att.get("url")
    if not url:
        return att
    if is_local_url(url):
        if not local.owns(owner_id, url):
            logger.debug("embedding skipped for %s: not owned by %s", url, owner_id)
            return att
        try:
            data = local.read(url)
        except StorageError as exc:
            logger.debug("embedding skipped for %s: %s", url, exc)
            return att
        return {**att, "dataUrl": to_data_url(_mime_for(att), data)}
    fetched = fetch_remote(http, url)
    if fetched is None:
        return att
    data, header = fetched
    return {**att, "dataUrl": to_data_url(_mime_for(att, header), data)}


def _attachments_for_export(raw, context: str, owner_id, embed: bool, http, local) -> list[dict]:
    out = []
    for index, att in enumerate(raw or []):
        if not isinstance(att, dict):
            continue
        att = {**att, "id": att.get("id") or f"{context}-att-{index}"}
        out.append(embed_data_url(att, owner_id, http, local) if embed else att)
    return out


def _records(rows, prefix: str, owner_id, embed: bool, http, local) -> list[dict]:
    records = []
    for row in rows:
        record = row.to_record()
        if "attachments" in record:
            record["attachments"] = _attachments_for_export(
                record["attachments"], f"{prefix}{row.id}", owner_id, embed, http, local
            )
        records.append(record)
    return records


def assemble_export(
    db: Session,
    user_id: int,
    embed_attachments: bool,
    http: httpx.Client,
    local: LocalAttachmentStore,
) -> dict:
    entries = (
        db.query(MoltEntry)
        .filter(MoltEntry.user_id == user_id)
        .order_by(MoltEntry.date.desc(), MoltEntry.id.desc())
        .all()
    )
    health = (
        db.query(HealthEntry)
        .filter(HealthEntry.user_id == user_id)
        .order_by(HealthEntry.date.desc(), HealthEntry.id.desc())
        .all()
    )
    breeding = (
        db.query(BreedingEntry)
        .filter(BreedingEntry.user_id == user_id)
        .order_by(BreedingEntry.pairing_date.desc(), BreedingEntry.id.desc())
        .all()
    )
    stacks = (
        db.query(ResearchStack)
        .filter(ResearchStack.user_id == user_id)
        .order_by(ResearchStack.updated_at.desc(), ResearchStack.id.desc())
        .all()
    )

    envelope = {
        "version": EXPORT_VERSION,
        "exportedAt": iso_utc(utcnow()),
        "entries": _records(entries, "", user_id, embed_attachments, http, local),
        "research": [s.to_record() for s in stacks],
        "health": _records(health, "health-", user_id, embed_attachments, http, local),
        "breeding": _records(breeding, "breeding-", user_id, embed_attachments, http, local),
    }
    logger.info(
        "export user=%s entries=%s research=%s health=%s breeding=%s embed=%s",
        user_id,
        len(envelope["entries"]),
        len(envelope["research"]),
        len(envelope["health"]),
        len(envelope["breeding"]),
        embed_attachments,
    )
    return envelope
