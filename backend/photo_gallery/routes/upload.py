"""
Photo Gallery — Upload Route Handler
======================================

What:  POST /api/upload for multipart photo uploads.
How:   Receives the `photos` file parts and the optional `folder` field,
       delegates to UploadService, returns the per-file outcome.

Request Flow:
    1. Client sends multipart/form-data, `photos` repeated (max_files)
    2. FastAPI collects the parts as UploadFile objects
    3. UploadService validates count, folder, type and size, then writes
    4. Uploaded temp files are always closed, success or not

Security Checks (this route):
    - Folder: PathGuard (single segment, no traversal)
    - File type: extension in ALLOWED_EXTENSIONS and content type image/*
    - File size: MAX_FILE_SIZE per file
    - File count: MAX_FILES per request
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from photo_gallery.dependencies import get_upload_service
from photo_gallery.schemas.photo import ErrorResponse, UploadResponse
from photo_gallery.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        200: {"description": "At least one file stored", "model": UploadResponse},
        400: {
            "description": "No files, too many files, file too large, type not allowed or invalid folder",
            "model": ErrorResponse,
        },
        500: {"description": "Disk write failed", "model": ErrorResponse},
    },
    summary="Upload photos",
)
async def upload_photos(
    photos: Optional[List[UploadFile]] = File(
        default=None,
        description="Image files (repeat the field for several files)",
    ),
    folder: Optional[str] = Form(
        default=None,
        description="Target folder directly under the photo root (default: temp)",
    ),
    service: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    logger.info(
        "Received upload request: %d file(s), folder=%s",
        len(photos or []),
        folder or "<default>",
    )

    try:
        return await service.store_uploads(photos, folder)
    finally:
        for upload in photos or []:
            await upload.close()
