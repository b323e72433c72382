# backend/moltly/services/importer/reconcile.py
"""
Re-creates the records of an export envelope under the importing user.

Accepts version 1 envelopes (entries, research) and version 2 envelopes
(+ health, breeding). Each record is normalized, its attachments re-hosted in
the importer's storage namespace, and inserted as a brand new row in its own
transaction. A failing record is reported in ``errors`` and the batch moves
on.

Importing never updates or deletes existing rows and is not idempotent: the
same file imported twice yields two copies of every record.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional
import logging
import uuid

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from moltly.errors import RecordValidationError, StorageError
from moltly.models.breeding_entry import BreedingEntry
from moltly.models.health_entry import HealthEntry
from moltly.models.molt_entry import MoltEntry
from moltly.models.research_stack import ResearchStack
from moltly.services.normalize.records import (
    NormalizeResult,
    normalize_breeding_entry,
    normalize_health_entry,
    normalize_molt_entry,
    normalize_stack,
)
from moltly.services.storage.fetch import fetch_remote
from moltly.services.storage.media import ext_from_mime, parse_data_url
from moltly.services.storage.store import AttachmentStore, LocalAttachmentStore, is_local_url

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    created_entries: int = 0
    created_stacks: int = 0
    created_health: int = 0
    created_breeding: int = 0
    errors: list[dict] = field(default_factory=list)

    def as_response(self) -> dict:
        return {
            "success": True,
            "createdEntries": self.created_entries,
            "createdStacks": self.created_stacks,
            "createdHealth": self.created_health,
            "createdBreeding": self.created_breeding,
            "errors": self.errors,
        }


@dataclass(frozen=True)
class _Collection:
    key: str
    model: type
    normalize: Callable[..., NormalizeResult]
    counter: str
    has_attachments: bool = True


COLLECTIONS = (
    _Collection("entries", MoltEntry, normalize_molt_entry, "created_entries"),
    _Collection("health", HealthEntry, normalize_health_entry, "created_health"),
    _Collection("breeding", BreedingEntry, normalize_breeding_entry, "created_breeding"),
    _Collection("research", ResearchStack, normalize_stack, "created_stacks", has_attachments=False),
)


class ImportReconciler:
    def __init__(
        self,
        db: Session,
        user_id: int,
        store: AttachmentStore,
        http: httpx.Client,
        local: Optional[LocalAttachmentStore] = None,
    ):
        self.db = db
        self.user_id = user_id
        self.store = store
        self.http = http
        self.local = local

    def run(self, payload: dict) -> ImportReport:
        report = ImportReport()
        for coll in COLLECTIONS:
            items = payload.get(coll.key)
            if not isinstance(items, list):
                continue
            for index, raw in enumerate(items):
                try:
                    self._import_one(coll, raw)
                except RecordValidationError as exc:
                    logger.warning("import %s[%s] rejected: %s", coll.key, index, [i.field for i in exc.issues])
                    report.errors.append(self._error(coll, index, raw, exc.message, exc.issues))
                except (StorageError, SQLAlchemyError) as exc:
                    self.db.rollback()
                    logger.warning("import %s[%s] failed: %s", coll.key, index, exc)
                    report.errors.append(self._error(coll, index, raw, "Could not store record."))
                else:
                    setattr(report, coll.counter, getattr(report, coll.counter) + 1)
        logger.info(
            "import user=%s entries=%s research=%s health=%s breeding=%s errors=%s",
            self.user_id,
            report.created_entries,
            report.created_stacks,
            report.created_health,
            report.created_breeding,
            len(report.errors),
        )
        return report

    @staticmethod
    def _error(coll: _Collection, index: int, raw: Any, message: str, issues=None) -> dict:
        err = {"collection": coll.key, "index": index, "message": message}
        if isinstance(raw, dict) and raw.get("id") is not None:
            err["id"] = str(raw["id"])
        if issues:
            err["details"] = [i.as_dict() for i in issues]
        return err

    def _import_one(self, coll: _Collection, raw: Any) -> None:
        record = coll.normalize(raw, keep_data_urls=True).unwrap()
        if coll.has_attachments:
            rehosted = (self._rehost(att) for att in record.get("attachments", []))
            record["attachments"] = [att for att in rehosted if att is not None]
        row = coll.model(user_id=self.user_id)
        row.apply_record(record)
        self.db.add(row)
        self.db.commit()

    def _rehost(self, att: dict) -> Optional[dict]:
        """
        Bytes from dataUrl (or, failing that, a fetch of url) are written
        under the importer's namespace. Without bytes the original url is
        kept as a last resort so the reference is not lost; with neither the
        attachment is dropped.
        """
        data: Optional[bytes] = None
        mime = att.get("type")
        parsed = parse_data_url(att["dataUrl"]) if att.get("dataUrl") else None
        if parsed is not None:
            data = parsed[1]
            mime = mime or parsed[0]
        elif att.get("url"):
            data, mime = self._fetch(att["url"], mime)

        url = att.get("url") or ""
        ext = ext_from_mime(mime)
        if data is not None:
            url = self.store.put(self.user_id, f"{uuid.uuid4()}.{ext}", data, mime or f"image/{ext}")
        elif not url:
            return None

        return {
            "id": att.get("id") or str(uuid.uuid4()),
            "name": att.get("name") or "attachment",
            "url": url,
            "type": mime or f"image/{ext}",
            "addedAt": att.get("addedAt") or datetime.now(timezone.utc).isoformat(),
        }

    def _fetch(self, url: str, mime: Optional[str]):
        if is_local_url(url):
            # only the importer's own uploads are read back; another owner's path is never followed
            if self.local is None or not self.local.owns(self.user_id, url):
                return None, mime
            try:
                return self.local.read(url), mime
            except StorageError:
                return None, mime
        fetched = fetch_remote(self.http, url)
        if fetched is None:
            return None, mime
        body, header = fetched
        return body, mime or (header.split(";")[0].strip() if header else None)


def import_payload(db, user_id, payload, store, http, local=None) -> ImportReport:
    return ImportReconciler(db, user_id, store, http, local).run(payload)
