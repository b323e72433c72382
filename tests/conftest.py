"""
Shared fixtures: one in-memory SQLite database and one uploads directory per
test, the FastAPI app wired to both, and two signed-in users.
"""
import os
import tempfile

# set before the app is imported: the engine and the /uploads mount read these at import
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="moltly-uploads-"))
os.environ["BCRYPT_ROUNDS"] = "4"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from moltly.db import get_db, init_db
from moltly.main import app
from moltly.models.user import User
from moltly.services.auth.rate_limit import InMemoryLoginAttemptStore, LoginRateLimiter
from moltly.services.auth.tokens import issue_token
from moltly.services.storage.fetch import get_http_client

_ENV_CLEAR = (
    "S3_ENDPOINT",
    "S3_BUCKET",
    "S3_REGION",
    "AWS_REGION",
    "S3_ACCESS_KEY",
    "S3_SECRET_KEY",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "S3_PUBLIC_URL",
    "WSCA_SYNC_URL",
    "WSCA_SYNC_SECRET",
    "ADMIN_EMAILS",
    "ADMIN_DISCORD_IDS",
)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for name in _ENV_CLEAR:
        monkeypatch.delenv(name, raising=False)
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    monkeypatch.setenv("UPLOADS_DIR", str(uploads))
    monkeypatch.setenv("SESSION_SECRET", "test-secret-with-enough-length-1234")
    return uploads


@pytest.fixture
def uploads_dir(_isolated_env):
    return _isolated_env


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def remote_files():
    """url -> (bytes, content-type) served to the app's outbound HTTP client."""
    return {}


@pytest.fixture
def http_client(remote_files):
    def handler(request: httpx.Request) -> httpx.Response:
        hit = remote_files.get(str(request.url))
        if hit is None:
            return httpx.Response(404)
        body, content_type = hit
        return httpx.Response(200, content=body, headers={"content-type": content_type})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(engine, http_client, clock):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_http_client] = lambda: http_client
    app.state.login_limiter = LoginRateLimiter(InMemoryLoginAttemptStore(), clock=clock)
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def _make_user(db_session, **fields) -> User:
    user = User(**fields)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def user(db_session):
    return _make_user(db_session, name="Keeper", email="keeper@example.com")


@pytest.fixture
def other_user(db_session):
    return _make_user(db_session, name="Other", email="other@example.com")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {issue_token(user.id)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {issue_token(other_user.id)}"}
