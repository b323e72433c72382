# backend/moltly/client/router.py
"""
Chooses where the client's records live.

The mode follows the session: anonymous visitors work against device
storage, signed-in users against the API. Until the session has resolved
there is no mode and every record call raises ModeUnresolved, so callers
render a neutral state instead of guessing. Once resolved, the mode is
fixed for the life of the router.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from moltly.models.base import iso_utc, utcnow
from moltly.services.export.assemble import EXPORT_VERSION

from .stores import COLLECTIONS, LocalRecordStore, RecordStore, SyncRecordStore


class DataMode(str, Enum):
    LOCAL = "local"
    SYNC = "sync"


class ModeUnresolved(RuntimeError):
    pass


@dataclass(frozen=True)
class ClientSession:
    status: str  # loading | authenticated | unauthenticated
    token: Optional[str] = None


def resolve_mode(session: Optional[ClientSession]) -> Optional[DataMode]:
    if session is None or session.status == "loading":
        return None
    if session.status == "authenticated" and session.token:
        return DataMode.SYNC
    return DataMode.LOCAL


class DataModeRouter:
    def __init__(self, local: LocalRecordStore, sync_factory: Callable[[str], SyncRecordStore]):
        self.local = local
        self.sync_factory = sync_factory
        self.mode: Optional[DataMode] = None
        self._store: Optional[RecordStore] = None

    def resolve(self, session: Optional[ClientSession]) -> Optional[DataMode]:
        if self.mode is not None:
            return self.mode
        mode = resolve_mode(session)
        if mode is DataMode.SYNC:
            self._store = self.sync_factory(session.token)
        elif mode is DataMode.LOCAL:
            self._store = self.local
        self.mode = mode
        return mode

    @property
    def store(self) -> RecordStore:
        if self._store is None:
            raise ModeUnresolved("session has not resolved yet")
        return self._store

    def list(self, collection: str) -> list[dict]:
        return self.store.list(collection)

    def create(self, collection: str, data: dict) -> dict:
        return self.store.create(collection, data)

    def update(self, collection: str, record_id: str, patch: dict) -> dict:
        return self.store.update(collection, record_id, patch)

    def delete(self, collection: str, record_id: str) -> None:
        self.store.delete(collection, record_id)

    def export_local(self) -> dict:
        """Guest data as an export envelope the server import accepts."""
        envelope = {"version": EXPORT_VERSION, "exportedAt": iso_utc(utcnow())}
        for collection in COLLECTIONS:
            envelope[collection] = self.local.list(collection)
        return envelope

    def push_local_to_sync(self, clear_local: bool = False) -> dict:
        """
        Upload guest data to the signed-in account through the import
        endpoint, which mints new server ids for every record.
        """
        if self.mode is not DataMode.SYNC:
            raise ModeUnresolved("pushing local data requires a signed-in session")
        report = self.store.import_envelope(self.export_local())
        if clear_local and not report.get("errors"):
            for collection in COLLECTIONS:
                self.local.clear(collection)
        return report
