# backend/moltly/config.py
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os

# /app/data inside the container, <repo>/data for local development
_container_data = Path("/app/data")
_repo_root = Path(__file__).resolve().parents[2]


def data_dir() -> Path:
    if _container_data.exists():
        return _container_data
    return _repo_root / "data"


def database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    db_path = data_dir() / "app.db"
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{db_path}"


def uploads_dir() -> Path:
    raw = os.getenv("UPLOADS_DIR")
    return Path(raw) if raw else data_dir() / "uploads"


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def _csv(name: str) -> list[str]:
    return [s.strip() for s in os.getenv(name, "").split(",") if s.strip()]


@dataclass(frozen=True)
class S3Settings:
    bucket: str
    region: str
    access_key: str
    secret_key: str
    endpoint: Optional[str] = None
    public_url: Optional[str] = None
    force_path_style: bool = True


def s3_settings() -> Optional[S3Settings]:
    """Object storage settings, or None when the filesystem backend applies."""
    bucket = os.getenv("S3_BUCKET", "")
    endpoint = os.getenv("S3_ENDPOINT", "")
    region = os.getenv("S3_REGION") or os.getenv("AWS_REGION") or "us-east-1"
    access_key = os.getenv("S3_ACCESS_KEY") or os.getenv("AWS_ACCESS_KEY_ID") or ""
    secret_key = os.getenv("S3_SECRET_KEY") or os.getenv("AWS_SECRET_ACCESS_KEY") or ""
    if not (bucket and (endpoint or region) and access_key and secret_key):
        return None
    return S3Settings(
        bucket=bucket,
        region=region,
        access_key=access_key,
        secret_key=secret_key,
        endpoint=endpoint or None,
        public_url=os.getenv("S3_PUBLIC_URL") or endpoint or None,
        force_path_style=os.getenv("S3_FORCE_PATH_STYLE", "true").lower() != "false",
    )


@dataclass(frozen=True)
class SyncSettings:
    url: str
    secret: str


def wsca_sync_settings() -> Optional[SyncSettings]:
    url = os.getenv("WSCA_SYNC_URL")
    secret = os.getenv("WSCA_SYNC_SECRET")
    if url and secret:
        return SyncSettings(url=url, secret=secret)
    return None


def admin_emails() -> set[str]:
    return {s.lower() for s in _csv("ADMIN_EMAILS")}


def admin_discord_ids() -> set[str]:
    return set(_csv("ADMIN_DISCORD_IDS"))


def session_secret() -> str:
    # dev default only; production deployments must set SESSION_SECRET
    return os.getenv("SESSION_SECRET", "moltly-dev-secret-change-me-please")


def session_ttl_seconds() -> int:
    return int(os.getenv("SESSION_TTL_SECONDS", str(30 * 24 * 3600)))


def bcrypt_rounds() -> int:
    return int(os.getenv("BCRYPT_ROUNDS", "12"))
