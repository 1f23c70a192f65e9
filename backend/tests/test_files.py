# Overview: Pytest coverage for image upload and on-the-fly resizing.

import io

import pytest
from PIL import Image
from urllib3.exceptions import MaxRetryError

from conftest import login_headers
from shopicano.errors import StorageError
from shopicano.storage import BlobStorage


def _png(width=400, height=200, color=(200, 30, 30)):
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def _upload(client, headers, data, filename="photo.png", content_type="image/png"):
    return client.post(
        "/v1/fs/",
        data={"file": (io.BytesIO(data), filename, content_type)},
        headers=headers,
        content_type="multipart/form-data",
    )


class TestUpload:
    def test_store_staff_upload(self, client, storage, store_a):
        _, owner = store_a
        data = _png()
        resp = _upload(client, login_headers(client, owner.email), data)
        assert resp.status_code == 201
        name = resp.json["data"]["name"]
        assert name.endswith(".png")
        assert resp.json["data"]["size"] == len(data)
        assert storage.objects[name].data == data

    def test_requires_store_staff(self, client, storage, customer):
        resp = _upload(client, login_headers(client, customer.email), _png())
        assert resp.status_code == 403

    def test_rejects_non_image_type(self, client, storage, store_a):
        _, owner = store_a
        resp = _upload(client, login_headers(client, owner.email), b"%PDF-1.4", "doc.pdf", "application/pdf")
        assert resp.status_code == 422
        assert resp.json["code"] == "FILE_UPLOAD_DATA_INVALID"


class TestServe:
    def test_original_bytes_without_dimensions(self, client, storage):
        data = _png()
        storage.put("original.png", data, "image/png")
        resp = client.get("/v1/fs/original.png")
        assert resp.status_code == 200
        assert resp.data == data
        assert resp.mimetype == "image/png"
        assert resp.headers["Content-Disposition"].startswith("inline;")
        assert resp.headers["X-Platform"] == "Shopicano"

    def test_width_only_keeps_aspect_ratio(self, client, storage):
        storage.put("wide.png", _png(400, 200), "image/png")
        resp = client.get("/v1/fs/wide.png?width=100")
        assert resp.status_code == 200
        assert resp.mimetype == "image/jpeg"
        with Image.open(io.BytesIO(resp.data)) as img:
            assert img.size == (100, 50)
            assert img.format == "JPEG"

    def test_both_dimensions(self, client, storage):
        storage.put("wide.png", _png(400, 200), "image/png")
        resp = client.get("/v1/fs/wide.png?width=50&height=50&quality=500")
        with Image.open(io.BytesIO(resp.data)) as img:
            assert img.size == (50, 50)

    def test_oversized_request_is_capped(self, client, storage):
        storage.put("tall.png", _png(10, 20), "image/png")
        resp = client.get("/v1/fs/tall.png?width=60000&height=60000")
        assert resp.status_code == 200
        with Image.open(io.BytesIO(resp.data)) as img:
            assert img.size == (4096, 4096)

        # A derived side is capped as well
        resp = client.get("/v1/fs/tall.png?width=3000")
        with Image.open(io.BytesIO(resp.data)) as img:
            assert img.size == (3000, 4096)

    def test_transparent_png_is_flattened(self, client, storage):
        buf = io.BytesIO()
        Image.new("RGBA", (40, 40), (0, 0, 0, 0)).save(buf, format="PNG")
        storage.put("alpha.png", buf.getvalue(), "image/png")
        resp = client.get("/v1/fs/alpha.png?height=20")
        assert resp.status_code == 200
        with Image.open(io.BytesIO(resp.data)) as img:
            assert img.mode == "RGB"

    def test_missing_file(self, client, storage):
        resp = client.get("/v1/fs/nothing-here.png")
        assert resp.status_code == 404
        assert resp.json["code"] == "FILE_NOT_FOUND"

    def test_resizing_a_non_image(self, client, storage):
        storage.put("notes.txt", b"plain text", "text/plain")
        resp = client.get("/v1/fs/notes.txt?width=10")
        assert resp.status_code == 422
        assert resp.json["code"] == "FILE_NOT_AN_IMAGE"

        # Without dimensions the raw bytes are still served
        assert client.get("/v1/fs/notes.txt").data == b"plain text"


# =============================================================================
# BLOB STORE FAILURES
# =============================================================================


class _UnreachableClient:
    """Minio client stand-in whose transport always fails."""

    def _fail(self, *args, **kwargs):
        raise MaxRetryError(None, "/shopicano", "connection refused")

    stat_object = get_object = put_object = _fail


class TestStorageFailures:
    def test_blob_storage_wraps_transport_errors(self):
        blobs = BlobStorage(_UnreachableClient(), "shopicano")
        with pytest.raises(StorageError):
            blobs.get("photo.png")
        with pytest.raises(StorageError):
            blobs.put("photo.png", b"data", "image/png")

    def test_read_failure_uses_envelope(self, client, storage, monkeypatch):
        def unreachable(name):
            raise StorageError("Blob store unreachable")

        monkeypatch.setattr(storage, "get", unreachable)
        resp = client.get("/v1/fs/photo.png")
        assert resp.status_code == 500
        assert resp.json == {"code": "STORAGE_FAILED", "title": "Storage request failed"}
        assert resp.headers["X-Platform"] == "Shopicano"

    def test_upload_failure_uses_envelope(self, client, storage, store_a, monkeypatch):
        def unreachable(name, data, content_type):
            raise StorageError("Blob store unreachable")

        monkeypatch.setattr(storage, "put", unreachable)
        _, owner = store_a
        resp = _upload(client, login_headers(client, owner.email), _png())
        assert resp.status_code == 500
        assert resp.json["code"] == "STORAGE_FAILED"
        assert storage.objects == {}
