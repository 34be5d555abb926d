"""
Photo Gallery — Pydantic Request/Response Schemas
==================================================

What:  Pydantic models defining the API contract with the gallery frontend.
Why:   Automatic serialization, request validation and OpenAPI docs.
How:   Attributes are snake_case in Python; `serialization_alias` keeps the
       JSON keys the frontend already consumes (`path`, `size`, `created`,
       `original`, `saved`, `currentPage`, `deletedPath`, ...). FastAPI
       serializes response models by alias.

None of these models are persisted. Photo and folder entries are snapshots
taken while listing; the filesystem stays the single source of truth.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Listing Models
# ══════════════════════════════════════════════════════════════════════════


class PhotoEntry(BaseModel):
    """
    What:  One image file as seen at listing time.
    Who:   Items of PaginationResult (GET /api/photos, /api/photos/{folder}).

    relative_path is the file name alone for the root listing and
    "{folder}/{name}" inside a folder; the frontend appends it to /photos/.
    """
    name: str = Field(description="File name on disk")
    relative_path: str = Field(serialization_alias="path", description="Path relative to the photo root")
    size_bytes: int = Field(serialization_alias="size", ge=0, description="File size in bytes")
    created_at: datetime = Field(serialization_alias="created", description="Creation time (UTC)")
    modified_at: datetime = Field(serialization_alias="modified", description="Last modification time (UTC)")
    extension: str = Field(description="Lowercase extension without the dot")

    model_config = {"frozen": True}


class FolderEntry(BaseModel):
    """A first-level subdirectory of the photo root."""
    name: str
    relative_path: str = Field(serialization_alias="path")
    created_at: datetime = Field(serialization_alias="created")
    modified_at: datetime = Field(serialization_alias="modified")

    model_config = {"frozen": True}


class PaginationResult(BaseModel):
    """
    What:  One page of a directory listing.

    Pagination strategy:
        Offset-based (page/limit). Galleries are modest in size and listed
        fresh from disk on every request, so there is no cursor to keep
        stable; out-of-range pages return an empty items list.
    """
    items: List[PhotoEntry] = Field(description="Photos on this page, newest first")
    current_page: int = Field(serialization_alias="currentPage", ge=1)
    total_pages: int = Field(serialization_alias="totalPages", ge=0)
    total_items: int = Field(serialization_alias="totalItems", ge=0)
    page_size: int = Field(serialization_alias="pageSize", ge=1)


# ══════════════════════════════════════════════════════════════════════════
# Upload Models
# ══════════════════════════════════════════════════════════════════════════


class UploadResult(BaseModel):
    """One file that was written to disk."""
    original_name: str = Field(serialization_alias="original", description="Recovered client file name")
    stored_name: str = Field(serialization_alias="saved", description="File name written to disk")
    size_bytes: int = Field(serialization_alias="size", ge=0)
    folder: str
    relative_path: str = Field(serialization_alias="path")


class UploadFailure(BaseModel):
    """One file that was rejected or could not be written."""
    original_name: str = Field(serialization_alias="original")
    error: str = Field(description="Machine-readable error code")
    message: str


class UploadResponse(BaseModel):
    """
    What:  Response of POST /api/upload.

    Only files that completed appear in `files`. When some, but not all,
    files fail, the request still succeeds and `failed` explains the rest.
    """
    success: bool = True
    message: str
    files: List[UploadResult]
    failed: List[UploadFailure] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Mutation Models
# ══════════════════════════════════════════════════════════════════════════


class FolderCreateRequest(BaseModel):
    # Optional so a missing name maps to our 400, not FastAPI's 422
    name: Optional[str] = Field(default=None, description="Name of the folder to create")


class FolderCreateResponse(BaseModel):
    success: bool = True
    message: str
    folder: FolderEntry


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
    deleted_path: str = Field(serialization_alias="deletedPath")


# ══════════════════════════════════════════════════════════════════════════
# System & Error Models
# ══════════════════════════════════════════════════════════════════════════


class SystemInfoResponse(BaseModel):
    """Server metadata returned by GET /api/system."""
    python_version: str = Field(serialization_alias="pythonVersion")
    version: str
    uptime: float = Field(description="Seconds since the service started")
    environment: str
    photo_dir: str = Field(serialization_alias="photoDir")
    max_file_size: int = Field(serialization_alias="maxFileSize")
    max_files: int = Field(serialization_alias="maxFiles")
    allowed_extensions: List[str] = Field(serialization_alias="allowedExtensions")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str
    photo_dir: str = Field(description="Photo root status: accessible, unavailable")
    uptime_seconds: float


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "invalid_path",
            "message": "Invalid path",
            "details": {"path": "../../etc/passwd"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
