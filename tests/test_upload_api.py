from io import BytesIO

from PIL import Image

from moltly.api.routers import upload
from moltly.main import app
from moltly.services.storage.store import S3AttachmentStore, get_store
from tests.helpers import StubS3, s3_settings

MAKE_TAG = 0x010F


def _jpeg_with_exif() -> bytes:
    img = Image.new("RGB", (8, 8), "orange")
    exif = Image.Exif()
    exif[MAKE_TAG] = "SpiderCam"
    buf = BytesIO()
    img.save(buf, format="JPEG", exif=exif)
    return buf.getvalue()


def test_upload_stores_image_and_strips_exif(client, auth_headers, user, uploads_dir):
    res = client.post(
        "/api/upload",
        files={"file": ("leg span.jpg", _jpeg_with_exif(), "image/jpeg")},
        headers=auth_headers,
    )
    assert res.status_code == 201
    (att,) = res.json()["attachments"]
    assert att["name"] == "leg_span.jpg"
    assert att["type"] == "image/jpeg"
    assert att["url"] == f"/uploads/{user.id}/{att['id']}.jpg"

    stored = uploads_dir / str(user.id) / f"{att['id']}.jpg"
    with Image.open(stored) as img:
        assert MAKE_TAG not in img.getexif()


def test_upload_several_files(client, auth_headers):
    gif = BytesIO()
    Image.new("P", (2, 2)).save(gif, format="GIF")
    res = client.post(
        "/api/upload",
        files=[
            ("file", ("a.jpg", _jpeg_with_exif(), "image/jpeg")),
            ("file", ("b.gif", gif.getvalue(), "image/gif")),
        ],
        headers=auth_headers,
    )
    assert res.status_code == 201
    assert [a["name"] for a in res.json()["attachments"]] == ["a.jpg", "b.gif"]


def test_upload_without_file_is_400(client, auth_headers):
    res = client.post("/api/upload", data={"note": "nothing attached"}, headers=auth_headers)
    assert res.status_code == 400


def test_upload_rejects_non_images(client, auth_headers):
    res = client.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")}, headers=auth_headers)
    assert res.status_code == 415


def test_upload_rejects_oversized_files(client, auth_headers, monkeypatch, uploads_dir):
    monkeypatch.setattr(upload, "MAX_UPLOAD_BYTES", 16)
    res = client.post("/api/upload", files={"file": ("big.png", b"x" * 17, "image/png")}, headers=auth_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "File exceeds 10MB limit."
    assert list(uploads_dir.iterdir()) == []


def test_upload_requires_session(client):
    res = client.post("/api/upload", files={"file": ("a.jpg", b"x", "image/jpeg")})
    assert res.status_code == 401


def test_upload_goes_to_object_store_when_configured(client, auth_headers, user):
    stub = StubS3()
    app.dependency_overrides[get_store] = lambda: S3AttachmentStore(s3_settings(), client=stub)
    res = client.post(
        "/api/upload",
        files={"file": ("a.jpg", _jpeg_with_exif(), "image/jpeg")},
        headers=auth_headers,
    )
    att = res.json()["attachments"][0]
    assert att["url"] == f"https://cdn.example.com/moltly/{user.id}/{att['id']}.jpg"
    assert ("moltly", f"{user.id}/{att['id']}.jpg") in stub.objects
