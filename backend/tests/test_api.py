"""
Photo Gallery — API Integration Tests
=======================================

What:  Full request/response cycle through the FastAPI app (middleware,
       routing, exception handlers, static mount) over HTTPX ASGITransport.

Test Strategy:
    ✅ Wire format: JSON keys the frontend consumes
    ✅ Status codes for every error category
    ✅ Traversal attempts never reach the filesystem
    ✅ Uploaded files are served back under /photos/
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from photo_gallery.config import Settings
from photo_gallery.main import create_app
from photo_gallery.services.storage import LocalFileStorage

pytestmark = pytest.mark.asyncio


def client_for(settings: Settings) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=create_app(settings)), base_url="http://test")


# ══════════════════════════════════════════════════════════════════════════
# Folders
# ══════════════════════════════════════════════════════════════════════════

class TestFolders:

    async def test_list_folders(self, test_client, photo_root):
        (photo_root / "2024").mkdir()
        (photo_root / ".cache").mkdir()

        response = await test_client.get("/api/folders")

        assert response.status_code == 200
        body = response.json()
        assert [f["name"] for f in body] == ["2024"]
        assert set(body[0]) == {"name", "path", "created", "modified"}

    async def test_create_then_conflict(self, test_client, photo_root):
        response = await test_client.post("/api/folders", json={"name": "vacation"})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["folder"]["name"] == "vacation"
        assert (photo_root / "vacation").is_dir()

        response = await test_client.post("/api/folders", json={"name": "vacation"})

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    @pytest.mark.parametrize("name", ["../evil", "a/b", "a\\b"])
    async def test_invalid_name(self, test_client, photo_root, name):
        response = await test_client.post("/api/folders", json={"name": name})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_path"
        assert list(photo_root.iterdir()) == []

    @pytest.mark.parametrize("payload", [{}, {"name": ""}, {"name": "  "}])
    async def test_missing_name(self, test_client, payload):
        response = await test_client.post("/api/folders", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


# ══════════════════════════════════════════════════════════════════════════
# Photo Listing & Deletion
# ══════════════════════════════════════════════════════════════════════════

class TestPhotos:

    async def test_root_listing_wire_format(self, test_client, make_photo):
        make_photo("beach.jpg", content=b"x" * 10)

        response = await test_client.get("/api/photos")

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "1"
        body = response.json()
        assert set(body) == {"items", "currentPage", "totalPages", "totalItems", "pageSize"}
        assert body["currentPage"] == 1
        assert body["pageSize"] == 12
        item = body["items"][0]
        assert set(item) == {"name", "path", "size", "created", "modified", "extension"}
        assert item["path"] == "beach.jpg"
        assert item["size"] == 10

    async def test_folder_second_page(self, test_client, make_photo):
        for i in range(15):
            make_photo(f"photo_{i:02d}.jpg", folder="2024", mtime_offset=i)

        response = await test_client.get("/api/photos/2024", params={"page": 2, "limit": 12})

        assert response.status_code == 200
        body = response.json()
        assert len(body["items"]) == 3
        assert body["totalPages"] == 2
        assert body["totalItems"] == 15
        assert body["items"][0]["path"] == "2024/photo_02.jpg"

    async def test_missing_folder(self, test_client):
        response = await test_client.get("/api/photos/nowhere")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.parametrize("url", ["/api/photos/%252e%252e", "/api/photos/..%5Cetc"])
    async def test_encoded_traversal_folder(self, test_client, url):
        response = await test_client.get(url)

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_path"

    async def test_nested_folder_rejected(self, test_client, make_photo):
        make_photo("deep.jpg", folder="2024/sub")

        response = await test_client.get("/api/photos/2024%252Fsub")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_path"

    async def test_limit_above_maximum(self, test_client):
        response = await test_client.get("/api/photos", params={"limit": 101})

        assert response.status_code == 400

    async def test_delete_traversal_never_touches_disk(self, test_client):
        with patch.object(LocalFileStorage, "stat", new_callable=AsyncMock) as stat, \
                patch.object(LocalFileStorage, "delete_file", new_callable=AsyncMock) as delete_file:
            response = await test_client.delete("/api/photos", params={"path": "../../etc/passwd"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_path"
        stat.assert_not_awaited()
        delete_file.assert_not_awaited()

    async def test_delete_missing_path(self, test_client):
        response = await test_client.delete("/api/photos")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    async def test_delete_not_found(self, test_client):
        response = await test_client.delete("/api/photos", params={"path": "2024/nothing.jpg"})

        assert response.status_code == 404

    async def test_delete(self, test_client, make_photo):
        path = make_photo("beach.jpg", folder="2024")

        response = await test_client.delete("/api/photos", params={"path": "2024/beach.jpg"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Photo deleted",
            "deletedPath": "2024/beach.jpg",
        }
        assert not path.exists()


# ══════════════════════════════════════════════════════════════════════════
# Upload
# ══════════════════════════════════════════════════════════════════════════

class TestUpload:

    async def test_upload_korean_file(self, test_client, photo_root):
        content = b"\xff\xd8" + b"\x00" * int(3.2 * 1024 * 1024) + b"\xff\xd9"

        response = await test_client.post(
            "/api/upload",
            files=[("photos", ("여름 휴가.jpg", content, "image/jpeg"))],
            data={"folder": "2024"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        stored = body["files"][0]
        assert set(stored) == {"original", "saved", "size", "folder", "path"}
        assert stored["original"] == "여름 휴가.jpg"
        assert stored["saved"].endswith("_여름_휴가.jpg")
        assert stored["size"] == len(content)
        assert stored["path"] == f"2024/{stored['saved']}"
        assert (photo_root / "2024" / stored["saved"]).is_file()

    async def test_mojibake_name_recovered(self, test_client):
        garbled = "여름 휴가.jpg".encode("utf-8").decode("latin-1")

        response = await test_client.post(
            "/api/upload",
            files=[("photos", (garbled, b"\xff\xd8\xff\xd9", "image/jpeg"))],
        )

        assert response.status_code == 200
        assert response.json()["files"][0]["original"] == "여름 휴가.jpg"
        assert response.json()["files"][0]["folder"] == "temp"

    async def test_disallowed_type(self, test_client, photo_root):
        response = await test_client.post(
            "/api/upload",
            files=[("photos", ("virus.exe", b"MZ", "application/octet-stream"))],
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "unsupported_media_type"
        assert "jpg, jpeg, png, gif, bmp, webp" in body["message"]
        assert list(photo_root.iterdir()) == []

    async def test_no_files(self, test_client):
        response = await test_client.post("/api/upload", data={"folder": "2024"})

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    async def test_too_many_files(self, photo_root):
        files = [("photos", (f"p{i}.jpg", b"\xff\xd8\xff\xd9", "image/jpeg")) for i in range(3)]

        async with client_for(Settings(photo_dir=str(photo_root), max_files=2)) as client:
            response = await client.post("/api/upload", files=files)

        assert response.status_code == 400
        assert response.json()["error"] == "too_many_files"
        assert list(photo_root.iterdir()) == []

    async def test_too_large(self, photo_root):
        async with client_for(Settings(photo_dir=str(photo_root), max_file_size=1024)) as client:
            response = await client.post(
                "/api/upload",
                files=[("photos", ("big.jpg", b"x" * 2048, "image/jpeg"))],
            )

        assert response.status_code == 400
        assert response.json()["error"] == "payload_too_large"
        assert list(photo_root.iterdir()) == []

    async def test_percent_name_upload_list_delete(self, test_client, photo_root):
        response = await test_client.post(
            "/api/upload",
            files=[("photos", ("photo%20copy.jpg", b"\xff\xd8\xff\xd9", "image/jpeg"))],
            data={"folder": "2024"},
        )
        saved = response.json()["files"][0]["saved"]
        assert saved.endswith("_photo%20copy.jpg")

        listing = (await test_client.get("/api/photos/2024")).json()
        listed_path = listing["items"][0]["path"]
        assert listed_path == f"2024/{saved}"

        response = await test_client.delete("/api/photos", params={"path": listed_path})

        assert response.status_code == 200
        assert response.json()["deletedPath"] == listed_path
        assert list((photo_root / "2024").iterdir()) == []

    async def test_uploaded_file_is_served(self, test_client):
        response = await test_client.post(
            "/api/upload",
            files=[("photos", ("beach.jpg", b"\xff\xd8jpeg\xff\xd9", "image/jpeg"))],
            data={"folder": "2024"},
        )
        saved = response.json()["files"][0]["saved"]

        response = await test_client.get(f"/photos/2024/{saved}")

        assert response.status_code == 200
        assert response.content == b"\xff\xd8jpeg\xff\xd9"


# ══════════════════════════════════════════════════════════════════════════
# System, Health & Cross-cutting
# ══════════════════════════════════════════════════════════════════════════

class TestSystem:

    async def test_system_info(self, test_client):
        response = await test_client.get("/api/system")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {
            "pythonVersion", "version", "uptime", "environment",
            "photoDir", "maxFileSize", "maxFiles", "allowedExtensions",
        }
        assert body["maxFiles"] == 10
        assert body["allowedExtensions"] == ["jpg", "jpeg", "png", "gif", "bmp", "webp"]

    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_health_without_photo_root(self, tmp_path):
        async with client_for(Settings(photo_dir=str(tmp_path / "missing"))) as client:
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    async def test_unknown_route(self, test_client):
        response = await test_client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    async def test_missing_static_file(self, test_client):
        response = await test_client.get("/photos/2024/nothing.jpg")

        assert response.status_code == 404

    async def test_request_id_and_security_headers(self, test_client):
        response = await test_client.get("/api/folders")

        assert len(response.headers["X-Request-ID"]) == 8
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"

    async def test_client_request_id_echoed(self, test_client):
        response = await test_client.get("/api/folders", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"
