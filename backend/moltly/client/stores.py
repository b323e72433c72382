# backend/moltly/client/stores.py
"""
Record persistence for the app client, one implementation per data mode.

LocalRecordStore keeps guest data in JSON files on the device and mints
UUIDs; SyncRecordStore talks to the REST API with the session's bearer
token and gets ids from the server. Both expose the same calls so the
code above them does not care which one it has.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import json
import logging
import uuid

import httpx

from moltly.services.normalize.records import NORMALIZERS, apply_patch

logger = logging.getLogger(__name__)

# collection -> (device storage key, API path)
COLLECTIONS = {
    "entries": ("moltly:guest-entries", "/api/logs"),
    "research": ("moltly:guest-research-stacks", "/api/research"),
    "health": ("moltly:guest-health", "/api/health"),
    "breeding": ("moltly:guest-breeding", "/api/breeding"),
}


class RecordNotFound(LookupError):
    pass


class SyncError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"unknown collection: {collection}")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RecordStore(ABC):
    @abstractmethod
    def list(self, collection: str) -> list[dict]: ...

    @abstractmethod
    def create(self, collection: str, data: dict) -> dict: ...

    @abstractmethod
    def update(self, collection: str, record_id: str, patch: dict) -> dict: ...

    @abstractmethod
    def delete(self, collection: str, record_id: str) -> None: ...


class LocalRecordStore(RecordStore):
    def __init__(self, directory):
        self.directory = Path(directory)
        # last known state per collection; survives failed writes
        self._memory: dict[str, list[dict]] = {}

    def path_for(self, collection: str) -> Path:
        key = COLLECTIONS[collection][0]
        return self.directory / f"{key.replace(':', '_')}.json"

    def _read(self, collection: str) -> list[dict]:
        if collection in self._memory:
            return self._memory[collection]
        path = self.path_for(collection)
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            parsed = []
        records = [r for r in parsed if isinstance(r, dict)] if isinstance(parsed, list) else []
        self._memory[collection] = records
        return records

    def _write(self, collection: str, records: list[dict]) -> None:
        self._memory[collection] = records
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path_for(collection).write_text(json.dumps(records, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            logger.warning("could not persist %s locally: %s", collection, exc)

    def list(self, collection):
        _check_collection(collection)
        return [dict(r) for r in self._read(collection)]

    def create(self, collection, data):
        _check_collection(collection)
        # guest attachments have nowhere else to live, so dataUrls are kept
        record = NORMALIZERS[collection](data, keep_data_urls=True).unwrap()
        now = _now()
        record.update({"id": str(uuid.uuid4()), "createdAt": now, "updatedAt": now})
        self._write(collection, [record, *self._read(collection)])
        return dict(record)

    def update(self, collection, record_id, patch):
        _check_collection(collection)
        records = self._read(collection)
        for index, current in enumerate(records):
            if current.get("id") == record_id:
                normalize = NORMALIZERS[collection]
                merged = apply_patch(lambda raw: normalize(raw, keep_data_urls=True), current, patch).unwrap()
                merged.update({
                    "id": record_id,
                    "createdAt": current.get("createdAt") or _now(),
                    "updatedAt": _now(),
                })
                self._write(collection, [*records[:index], merged, *records[index + 1:]])
                return dict(merged)
        raise RecordNotFound(record_id)

    def delete(self, collection, record_id):
        _check_collection(collection)
        records = self._read(collection)
        remaining = [r for r in records if r.get("id") != record_id]
        if len(remaining) == len(records):
            raise RecordNotFound(record_id)
        self._write(collection, remaining)

    def clear(self, collection: str) -> None:
        _check_collection(collection)
        self._memory[collection] = []
        try:
            self.path_for(collection).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("could not clear %s locally: %s", collection, exc)


class SyncRecordStore(RecordStore):
    def __init__(self, base_url: str, token: str, transport: Optional[httpx.BaseTransport] = None):
        self.client = httpx.Client(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=httpx.Timeout(30.0, connect=5.0),
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def _request(self, method: str, path: str, **kwargs):
        try:
            res = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise SyncError(f"{method} {path} failed: {exc}") from exc
        if res.status_code == 404:
            raise RecordNotFound(path)
        if res.status_code >= 400:
            try:
                message = res.json().get("message") or res.text
            except ValueError:
                message = res.text
            raise SyncError(message, status_code=res.status_code)
        return res.json()

    def list(self, collection):
        _check_collection(collection)
        return self._request("GET", COLLECTIONS[collection][1])

    def create(self, collection, data):
        _check_collection(collection)
        return self._request("POST", COLLECTIONS[collection][1], json=data)

    def update(self, collection, record_id, patch):
        _check_collection(collection)
        return self._request("PATCH", f"{COLLECTIONS[collection][1]}/{record_id}", json=patch)

    def delete(self, collection, record_id):
        _check_collection(collection)
        self._request("DELETE", f"{COLLECTIONS[collection][1]}/{record_id}")

    def import_envelope(self, envelope: dict) -> dict:
        return self._request("POST", "/api/import", json=envelope)
