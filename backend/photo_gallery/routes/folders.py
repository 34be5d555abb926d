"""
Photo Gallery — Folder Route Handlers
=======================================

What:  GET /api/folders (list) and POST /api/folders (create).
Why:   Folders are the only level of organization: one subdirectory per
       album directly under the photo root, never nested.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends

from photo_gallery.dependencies import get_gallery_service
from photo_gallery.schemas.photo import (
    ErrorResponse,
    FolderCreateRequest,
    FolderCreateResponse,
    FolderEntry,
)
from photo_gallery.services.gallery_service import GalleryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Folders"])


@router.get(
    "/folders",
    response_model=List[FolderEntry],
    responses={500: {"description": "Photo root unreadable", "model": ErrorResponse}},
    summary="List folders",
    description="First-level folders of the photo root, most recently modified first. Hidden folders are omitted.",
)
async def list_folders(
    service: GalleryService = Depends(get_gallery_service),
) -> List[FolderEntry]:
    return await service.list_folders()


@router.post(
    "/folders",
    status_code=201,
    response_model=FolderCreateResponse,
    responses={
        201: {"description": "Folder created", "model": FolderCreateResponse},
        400: {"description": "Missing or invalid folder name", "model": ErrorResponse},
        409: {"description": "Folder already exists", "model": ErrorResponse},
    },
    summary="Create a folder",
)
async def create_folder(
    payload: Optional[FolderCreateRequest] = Body(default=None),
    service: GalleryService = Depends(get_gallery_service),
) -> FolderCreateResponse:
    """
    Create one folder directly under the photo root.

    The name is trimmed; it must be non-empty, contain no `/` or `\\`, and
    carry no `..` segment.
    """
    folder = await service.create_folder(payload.name if payload else None)
    return FolderCreateResponse(message="Folder created", folder=folder)
