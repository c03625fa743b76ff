import io
import os

import pytest
from werkzeug.datastructures import FileStorage

from community_portal.errors import FileConstraintError, StorageError
from community_portal.extensions import db
from community_portal.models import RequestSubmission
from community_portal.services import uploads
from community_portal.storage import storage

FIELDS = {
    "fullName": "Maryam Ali",
    "email": "maryam@example.com",
    "phone": "555-0100",
    "requestType": "maintenance",
    "subject": "Broken light",
    "description": "The hall light is out.",
}


def _file(name="photo.png", content=b"\x89PNG fake", mimetype="image/png"):
    return (io.BytesIO(content), name, mimetype)


def _post(client, files=(), **extra):
    data = dict(FIELDS, **extra)
    if files:
        data["files"] = list(files)
    return client.post("/api/submit-request", data=data, content_type="multipart/form-data")


def _stored(app):
    folder = app.config["UPLOAD_FOLDER"]
    return sorted(os.listdir(folder)) if os.path.isdir(folder) else []


def _request_count(app):
    with app.app_context():
        return db.session.query(RequestSubmission).count()


def test_submit_without_files(app, client):
    resp = _post(client)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["message"]
    assert body["data"]["fileUrls"] == []
    assert body["data"]["status"] == "pending"
    assert body["data"]["address"] is None


def test_submit_with_five_files_stores_and_serves_them(app, client):
    files = [_file(f"photo{i}.png", content=f"file-{i}".encode()) for i in range(5)]
    resp = _post(client, files)
    assert resp.status_code == 201

    urls = resp.get_json()["data"]["fileUrls"]
    assert len(urls) == 5
    assert all(u.startswith("/uploads/") and u.endswith(".png") for u in urls)
    assert len(_stored(app)) == 5

    served = client.get(urls[2])
    assert served.status_code == 200
    assert served.data == b"file-2"


def test_sixth_file_rejects_whole_request(app, client):
    resp = _post(client, [_file(f"p{i}.png") for i in range(6)])
    assert resp.status_code == 400
    assert "at most 5" in resp.get_json()["message"]
    assert _stored(app) == []
    assert _request_count(app) == 0


def test_disallowed_type_rejects_whole_request(app, client):
    resp = _post(client, [_file(), _file("run.exe", b"MZ", "application/x-msdownload")])
    assert resp.status_code == 400
    assert "Invalid file type" in resp.get_json()["message"]
    assert _stored(app) == []


def test_oversized_file_rejects_whole_request(make_app):
    app = make_app(MAX_UPLOAD_FILE_BYTES=1024)
    resp = _post(app.test_client(), [_file(), _file("big.pdf", b"x" * 2048, "application/pdf")])
    assert resp.status_code == 400
    assert "too large" in resp.get_json()["message"]
    assert _stored(app) == []


def test_body_over_content_length_is_json_400(make_app):
    app = make_app(MAX_CONTENT_LENGTH=512)
    resp = _post(app.test_client(), [_file("big.pdf", b"x" * 4096, "application/pdf")])
    assert resp.status_code == 400
    assert "too large" in resp.get_json()["message"].lower()


def test_text_validation_happens_before_files_are_written(app, client):
    resp = client.post(
        "/api/submit-request",
        data={"fullName": "Maryam", "files": [_file()]},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert "email" in resp.get_json()["errors"]
    assert _stored(app) == []


def test_files_removed_when_record_insert_fails(app, client, monkeypatch):
    def _fail(data):
        raise StorageError("Failed to save request")

    monkeypatch.setattr(storage, "create_request", _fail)
    resp = _post(client, [_file(), _file("doc.pdf", b"%PDF", "application/pdf")])
    assert resp.status_code == 500
    assert _stored(app) == []


def test_missing_upload_is_404(client):
    assert client.get("/uploads/nope.png").status_code == 404


# ----------------------------
# Service-level checks
# ----------------------------
def test_validate_files_default_limit_is_10mb():
    ok = FileStorage(io.BytesIO(b"x" * uploads.MAX_FILE_BYTES), "a.pdf", content_type="application/pdf")
    uploads.validate_files([ok])

    big = FileStorage(io.BytesIO(b"x" * (uploads.MAX_FILE_BYTES + 1)), "b.pdf", content_type="application/pdf")
    with pytest.raises(FileConstraintError):
        uploads.validate_files([big])


def test_stored_name_keeps_extension_only():
    name = uploads.stored_name("../../etc/My Report.DOCX")
    stem, ext = os.path.splitext(name)
    assert ext == ".docx"
    ms, rnd = stem.split("-")
    assert ms.isdigit() and rnd.isdigit()


@pytest.mark.parametrize(
    "original, ext",
    [
        ("صورة.png", ".png"),
        ("фото.JPG", ".jpg"),
        ("report.p$f", ""),
        ("no-extension", ""),
        (None, ""),
    ],
)
def test_stored_name_extension_from_raw_filename(original, ext):
    assert os.path.splitext(uploads.stored_name(original))[1] == ext


def test_non_ascii_filename_keeps_extension(app, client):
    resp = _post(client, [_file("صورة.png", content=b"arabic-name")])
    assert resp.status_code == 201

    [url] = resp.get_json()["data"]["fileUrls"]
    assert url.endswith(".png")
    assert client.get(url).data == b"arabic-name"


def test_present_files_skips_empty_inputs():
    empty = FileStorage(io.BytesIO(b""), "", content_type="application/octet-stream")
    real = FileStorage(io.BytesIO(b"x"), "a.png", content_type="image/png")
    assert uploads.present_files([empty, real]) == [real]


def test_store_files_cleans_up_partial_write(tmp_path, monkeypatch):
    files = [
        FileStorage(io.BytesIO(b"one"), "a.png", content_type="image/png"),
        FileStorage(io.BytesIO(b"two"), "b.png", content_type="image/png"),
    ]
    real_save = FileStorage.save
    calls = []

    def _save(self, dst, *args, **kwargs):
        calls.append(dst)
        if len(calls) == 2:
            raise OSError("disk full")
        return real_save(self, dst, *args, **kwargs)

    monkeypatch.setattr(FileStorage, "save", _save)
    with pytest.raises(OSError):
        uploads.store_files(files, str(tmp_path))
    assert os.listdir(tmp_path) == []
