# backend/moltly/services/storage/store.py
"""
Where attachment binaries live.

Two interchangeable backends behind AttachmentStore.put(): the local
filesystem under ``uploads/{owner}/{filename}`` (served at /uploads) or an
S3-compatible bucket under key ``{owner}/{filename}``. Which one applies is a
pure function of configuration; a request resolves it once via get_store().
"""
from pathlib import Path
from typing import Optional
from urllib.parse import quote, unquote, urlparse
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from moltly.config import S3Settings, s3_settings, uploads_dir
from moltly.errors import StorageError

logger = logging.getLogger(__name__)

LOCAL_PREFIX = "/uploads/"


def object_key_for(owner_id, filename: str) -> str:
    return f"{owner_id}/{filename}"


def is_local_url(url: Optional[str]) -> bool:
    return bool(url) and url.startswith(LOCAL_PREFIX)


class AttachmentStore:
    backend = "base"

    def put(self, owner_id, filename: str, data: bytes, content_type: Optional[str] = None) -> str:
        raise NotImplementedError

    def delete(self, url: str) -> bool:
        """Remove the object behind url if this backend owns it."""
        raise NotImplementedError

    def owns(self, owner_id, url: str) -> bool:
        """True when url points into owner_id's namespace of this backend."""
        raise NotImplementedError


class LocalAttachmentStore(AttachmentStore):
    backend = "local"

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, url: str) -> Optional[Path]:
        if not is_local_url(url):
            return None
        rel = unquote(url[len(LOCAL_PREFIX):])
        root = self.root.resolve()
        path = (root / rel).resolve()
        # refuse ../ escapes out of the uploads root
        if root not in path.parents:
            return None
        return path

    def owned_path(self, owner_id, url: str) -> Optional[Path]:
        path = self.path_for(url)
        if path is None or (self.root.resolve() / str(owner_id)) not in path.parents:
            return None
        return path

    def owns(self, owner_id, url: str) -> bool:
        return self.owned_path(owner_id, url) is not None

    def put(self, owner_id, filename, data, content_type=None) -> str:
        dest_dir = self.root / str(owner_id)
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            (dest_dir / filename).write_bytes(data)
        except OSError as exc:
            raise StorageError(f"could not write {filename}") from exc
        logger.debug("stored %s bytes at %s/%s", len(data), owner_id, filename)
        return f"{LOCAL_PREFIX}{owner_id}/{filename}"

    def read(self, url: str) -> bytes:
        path = self.path_for(url)
        if path is None:
            raise StorageError(f"not a local upload: {url}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"could not read {url}") from exc

    def delete(self, url: str) -> bool:
        path = self.path_for(url)
        if path is None or not path.exists():
            return False
        path.unlink()
        return True


class S3AttachmentStore(AttachmentStore):
    backend = "s3"

    def __init__(self, settings: S3Settings, client=None):
        self.settings = settings
        if client is None:
            client_kwargs = {
                "service_name": "s3",
                "region_name": settings.region,
                "aws_access_key_id": settings.access_key,
                "aws_secret_access_key": settings.secret_key,
                "config": Config(
                    signature_version="s3v4",
                    s3={"addressing_style": "path" if settings.force_path_style else "auto"},
                ),
            }
            if settings.endpoint:
                client_kwargs["endpoint_url"] = settings.endpoint
            client = boto3.client(**client_kwargs)
        self.client = client

    @property
    def base_url(self) -> str:
        base = self.settings.public_url or f"https://s3.{self.settings.region}.amazonaws.com"
        return base.rstrip("/")

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{self.settings.bucket}/{quote(key)}"

    def key_from_url(self, url: str) -> Optional[str]:
        """Object key for a url minted by url_for(); None for any other host or bucket."""
        prefix = f"{self.base_url}/{self.settings.bucket}/"
        if not url or not url.startswith(prefix):
            return None
        key = unquote(urlparse(url[len(prefix):]).path)
        if not key or ".." in key.split("/"):
            return None
        return key

    def owns(self, owner_id, url: str) -> bool:
        key = self.key_from_url(url)
        return key is not None and key.startswith(f"{owner_id}/")

    def put(self, owner_id, filename, data, content_type=None) -> str:
        key = object_key_for(owner_id, filename)
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=self.settings.bucket, Key=key, Body=data, **extra)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"could not upload {key}") from exc
        logger.debug("s3 put bucket=%s key=%s size=%s", self.settings.bucket, key, len(data))
        return self.url_for(key)

    def delete(self, url: str) -> bool:
        key = self.key_from_url(url)
        if key is None:
            return False
        try:
            self.client.delete_object(Bucket=self.settings.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"could not delete {key}") from exc
        return True


def local_store() -> LocalAttachmentStore:
    return LocalAttachmentStore(uploads_dir())


def get_store() -> AttachmentStore:
    """Object storage when fully configured, the filesystem otherwise."""
    settings = s3_settings()
    if settings is not None:
        return S3AttachmentStore(settings)
    return local_store()


def discard(store: AttachmentStore, owner_id, urls) -> None:
    """
    Best-effort cleanup of orphaned attachments; failures are only logged.
    Only objects inside owner_id's namespace are removed, whatever the url.
    """
    local = local_store()
    for url in urls:
        if not url:
            continue
        target = local if is_local_url(url) else store
        if not target.owns(owner_id, url):
            logger.debug("orphan cleanup skipped for %s: not owned by %s", url, owner_id)
            continue
        try:
            target.delete(url)
        except (StorageError, OSError) as exc:
            logger.debug("orphan cleanup skipped for %s: %s", url, exc)
