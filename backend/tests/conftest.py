"""
Photo Gallery — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Every test gets its own temporary photo root and its own app/services
       built from an explicit Settings object, so tests never share state.

Fixture Hierarchy:
    ├── photo_root:        Fresh temporary photo directory
    ├── settings:          Settings pointing at photo_root
    ├── path_guard / gallery_service / upload_service
    ├── make_photo:        Writes a file with a chosen modification time
    ├── make_upload:       Builds an UploadFile like FastAPI hands to routes
    ├── sample_image_bytes
    └── test_client:       HTTPX AsyncClient talking to a fresh app
"""

import io
import os
import tempfile

# Environment for the module-level app in photo_gallery.main, set BEFORE any
# application import so it never points at a real photo directory
os.environ["PHOTO_DIR"] = tempfile.mkdtemp(prefix="photo_gallery_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ENVIRONMENT"] = "test"

from typing import Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import UploadFile  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from starlette.datastructures import Headers  # noqa: E402

from photo_gallery.config import Settings  # noqa: E402
from photo_gallery.services.gallery_service import GalleryService  # noqa: E402
from photo_gallery.services.path_guard import PathGuard  # noqa: E402
from photo_gallery.services.upload_service import UploadService  # noqa: E402

# Fixed reference instant for modification times (2024-07-01T00:00:00Z)
BASE_MTIME = 1_719_792_000


@pytest.fixture
def photo_root(tmp_path):
    """A fresh, empty photo root for each test."""
    root = tmp_path / "photos"
    root.mkdir()
    return root


@pytest.fixture
def settings(photo_root):
    return Settings(photo_dir=str(photo_root), environment="test")


@pytest.fixture
def path_guard(settings):
    return PathGuard(settings)


@pytest.fixture
def gallery_service(settings):
    return GalleryService(settings)


@pytest.fixture
def upload_service(settings):
    return UploadService(settings)


@pytest.fixture
def make_photo(photo_root):
    """
    Create a file under the photo root with a given modification time.

    Usage:
        make_photo("beach.jpg", mtime_offset=10)            # root
        make_photo("beach.jpg", folder="2024", content=b"x")
    """

    def _make(
        name: str,
        folder: Optional[str] = None,
        content: bytes = b"\xff\xd8\xff\xd9",
        mtime_offset: int = 0,
    ):
        directory = photo_root / folder if folder else photo_root
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_bytes(content)
        mtime = BASE_MTIME + mtime_offset
        os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def make_upload():
    """Build an UploadFile the way FastAPI passes multipart parts to handlers."""

    def _make(
        filename: str,
        content: bytes = b"\xff\xd8\xff\xd9",
        content_type: Optional[str] = "image/jpeg",
        with_size: bool = True,
    ) -> UploadFile:
        headers = Headers({"content-type": content_type}) if content_type else Headers({})
        return UploadFile(
            file=io.BytesIO(content),
            filename=filename,
            headers=headers,
            size=len(content) if with_size else None,
        )

    return _make


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def app(settings):
    from photo_gallery.main import create_app
    return create_app(settings)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def base_mtime():
    """Reference modification time used by make_photo."""
    return BASE_MTIME
