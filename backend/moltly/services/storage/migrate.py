# backend/moltly/services/storage/migrate.py
"""
Moves a user's filesystem attachments (``/uploads/...`` urls) into the
object store and rewrites the referencing entries. Files are unlinked only
after the upload succeeds; a file that fails stays where it was and is
reported.
"""
from dataclasses import dataclass, field
from pathlib import PurePosixPath
import logging

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from moltly.errors import StorageError
from moltly.models.breeding_entry import BreedingEntry
from moltly.models.health_entry import HealthEntry
from moltly.models.molt_entry import MoltEntry
from moltly.services.storage.media import mime_from_name
from moltly.services.storage.store import LocalAttachmentStore, S3AttachmentStore, is_local_url

logger = logging.getLogger(__name__)


@dataclass
class MigrationReport:
    migrated_files: int = 0
    updated_entries: int = 0
    errors: list[dict] = field(default_factory=list)

    def as_response(self) -> dict:
        return {
            "migratedFiles": self.migrated_files,
            "updatedEntries": self.updated_entries,
            "errors": self.errors,
        }


def migrate_local_uploads(
    db: Session,
    user_id: int,
    local: LocalAttachmentStore,
    remote: S3AttachmentStore,
) -> MigrationReport:
    report = MigrationReport()
    for model in (MoltEntry, HealthEntry, BreedingEntry):
        for row in db.query(model).filter(model.user_id == user_id).all():
            attachments = [dict(a) for a in row.attachments or []]
            changed = False
            for att in attachments:
                url = att.get("url") or ""
                if not is_local_url(url):
                    continue
                if not local.owns(user_id, url):
                    # another owner's file stays put and keeps its reference
                    report.errors.append({"id": str(row.id), "error": f"not an upload of this account: {url}"})
                    continue
                filename = PurePosixPath(url).name
                try:
                    data = local.read(url)
                    att["url"] = remote.put(user_id, filename, data, mime_from_name(filename) or "application/octet-stream")
                except StorageError as exc:
                    report.errors.append({"id": str(row.id), "error": str(exc)})
                    continue
                try:
                    local.delete(url)
                except OSError as exc:
                    logger.debug("could not remove migrated file %s: %s", url, exc)
                changed = True
                report.migrated_files += 1
            if changed:
                row.attachments = attachments
                flag_modified(row, "attachments")
                db.commit()
                report.updated_entries += 1
    logger.info(
        "upload migration user=%s files=%s entries=%s errors=%s",
        user_id,
        report.migrated_files,
        report.updated_entries,
        len(report.errors),
    )
    return report
