import pytest

from moltly.errors import StorageError
from moltly.services.storage.media import ext_from_mime, parse_data_url, sanitize_filename, to_data_url
from moltly.services.storage.store import (
    LocalAttachmentStore,
    S3AttachmentStore,
    discard,
    get_store,
    object_key_for,
)
from tests.helpers import StubS3, s3_settings


def test_local_put_read_delete(tmp_path):
    store = LocalAttachmentStore(tmp_path)
    url = store.put(7, "a.png", b"bytes", "image/png")
    assert url == "/uploads/7/a.png"
    assert (tmp_path / "7" / "a.png").read_bytes() == b"bytes"
    assert store.read(url) == b"bytes"
    assert store.delete(url) is True
    assert store.delete(url) is False


def test_local_refuses_path_escape(tmp_path):
    store = LocalAttachmentStore(tmp_path / "uploads")
    (tmp_path / "secret.txt").write_text("no")
    with pytest.raises(StorageError):
        store.read("/uploads/../secret.txt")


def test_local_write_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    store = LocalAttachmentStore(blocker)
    with pytest.raises(StorageError):
        store.put(1, "a.png", b"x")


def test_s3_put_uses_owner_namespace():
    client = StubS3()
    store = S3AttachmentStore(s3_settings(), client=client)
    url = store.put(3, "b.jpg", b"jpeg", "image/jpeg")
    assert url == "https://cdn.example.com/moltly/3/b.jpg"
    assert client.objects[("moltly", object_key_for(3, "b.jpg"))] == (b"jpeg", "image/jpeg")
    assert store.key_from_url(url) == "3/b.jpg"


def test_s3_default_public_url_uses_region():
    store = S3AttachmentStore(s3_settings(public_url=None, endpoint=None, region="eu-west-1"), client=StubS3())
    assert store.url_for("1/x.png") == "https://s3.eu-west-1.amazonaws.com/moltly/1/x.png"


def test_s3_failure_raises_storage_error():
    store = S3AttachmentStore(s3_settings(), client=StubS3(fail=True))
    with pytest.raises(StorageError):
        store.put(1, "a.png", b"x")


def test_s3_delete_ignores_foreign_urls():
    client = StubS3()
    store = S3AttachmentStore(s3_settings(), client=client)
    assert store.delete("https://elsewhere.example.com/other/1/a.png") is False
    assert store.delete("https://cdn.example.com/moltly/1/a.png") is True
    assert client.deleted == [("moltly", "1/a.png")]


def test_local_ownership_is_by_resolved_directory(tmp_path):
    store = LocalAttachmentStore(tmp_path)
    assert store.owns(1, "/uploads/1/a.png")
    assert store.owns(1, "/uploads/1/sub/a.png")
    assert not store.owns(1, "/uploads/2/a.png")
    assert not store.owns(1, "/uploads/10/a.png")
    assert not store.owns(1, "/uploads/1/../2/a.png")
    assert not store.owns(1, "/uploads/1/%2e%2e/2/a.png")
    assert not store.owns(1, "/uploads/1")
    assert not store.owns(1, "https://cdn.example.com/moltly/1/a.png")


def test_s3_ownership_needs_own_host_bucket_and_prefix():
    store = S3AttachmentStore(s3_settings(), client=StubS3())
    assert store.owns(1, "https://cdn.example.com/moltly/1/a.png")
    assert not store.owns(1, "https://cdn.example.com/moltly/2/a.png")
    assert not store.owns(1, "https://cdn.example.com/moltly/10/a.png")
    assert not store.owns(1, "https://evil.example.com/moltly/1/a.png")
    assert not store.owns(1, "https://cdn.example.com/other/1/a.png")
    assert not store.owns(1, "https://cdn.example.com/moltly/1/../2/a.png")
    assert store.key_from_url("https://evil.example.com/moltly/2/a.png") is None


def test_discard_is_best_effort(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path))
    (tmp_path / "1").mkdir()
    (tmp_path / "1" / "a.png").write_bytes(b"x")
    client = StubS3()
    store = S3AttachmentStore(s3_settings(), client=client)
    discard(store, 1, ["/uploads/1/a.png", "/uploads/1/missing.png", "https://cdn.example.com/moltly/1/b.png", None])
    assert not (tmp_path / "1" / "a.png").exists()
    assert client.deleted == [("moltly", "1/b.png")]


def test_discard_leaves_other_owners_objects(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path))
    (tmp_path / "2").mkdir()
    (tmp_path / "2" / "secret.png").write_bytes(b"private")
    client = StubS3()
    store = S3AttachmentStore(s3_settings(), client=client)
    discard(store, 1, [
        "/uploads/2/secret.png",
        "/uploads/1/../2/secret.png",
        "https://cdn.example.com/moltly/2/k.png",
        "https://evil.example.com/moltly/2/k.png",
    ])
    assert (tmp_path / "2" / "secret.png").read_bytes() == b"private"
    assert client.deleted == []


def test_backend_selection_follows_configuration(monkeypatch):
    assert get_store().backend == "local"

    monkeypatch.setenv("S3_BUCKET", "moltly")
    monkeypatch.setenv("S3_ACCESS_KEY", "key")
    assert get_store().backend == "local"

    monkeypatch.setenv("S3_SECRET_KEY", "secret")
    monkeypatch.setenv("S3_ENDPOINT", "http://minio:9000")
    store = get_store()
    assert store.backend == "s3"
    assert store.settings.public_url == "http://minio:9000"


def test_data_url_helpers():
    data_url = to_data_url("image/png", b"\x00\x01")
    assert parse_data_url(data_url) == ("image/png", b"\x00\x01")
    assert parse_data_url("https://example.com/a.png") is None
    assert ext_from_mime("image/webp") == "webp"
    assert ext_from_mime(None) == "jpg"
    assert sanitize_filename("../my photo!.png") == ".._my_photo_.png"
