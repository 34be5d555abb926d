"""
Photo Gallery — Photo Route Handlers
======================================

What:  GET /api/photos, GET /api/photos/{folder} and DELETE /api/photos.
How:   Extracts query/path parameters and delegates to GalleryService.

Pagination:
    page:  1-based, default 1
    limit: items per page, default Settings.default_page_size (12),
            at most Settings.max_page_size

Caching:
    Listings are always read fresh from disk; responses are marked
    no-store so a deleted photo never reappears from a browser cache.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from photo_gallery.dependencies import get_gallery_service
from photo_gallery.schemas.photo import DeleteResponse, ErrorResponse, PaginationResult
from photo_gallery.services.gallery_service import GalleryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Photos"])


@router.get(
    "/photos",
    response_model=PaginationResult,
    responses={
        200: {"description": "One page of photos in the photo root", "model": PaginationResult},
        500: {"description": "Photo root unreadable", "model": ErrorResponse},
    },
    summary="List photos in the photo root",
)
async def list_root_photos(
    response: Response,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(default=None, ge=1, description="Items per page"),
    service: GalleryService = Depends(get_gallery_service),
) -> PaginationResult:
    result = await service.list_photos(folder=None, page=page, page_size=limit)
    response.headers["Cache-Control"] = "no-store"
    response.headers["X-Total-Count"] = str(result.total_items)
    return result


@router.get(
    "/photos/{folder}",
    response_model=PaginationResult,
    responses={
        200: {"description": "One page of photos in the folder", "model": PaginationResult},
        400: {"description": "Invalid folder name", "model": ErrorResponse},
        404: {"description": "Folder not found", "model": ErrorResponse},
    },
    summary="List photos in one folder",
)
async def list_folder_photos(
    folder: str,
    response: Response,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(default=None, ge=1, description="Items per page"),
    service: GalleryService = Depends(get_gallery_service),
) -> PaginationResult:
    """
    List one folder. The folder name is checked by PathGuard before the
    directory is touched; `..` in any form yields 400.
    """
    result = await service.list_photos(folder=folder, page=page, page_size=limit)
    response.headers["Cache-Control"] = "no-store"
    response.headers["X-Total-Count"] = str(result.total_items)
    return result


@router.delete(
    "/photos",
    response_model=DeleteResponse,
    responses={
        200: {"description": "Photo deleted", "model": DeleteResponse},
        400: {"description": "Missing or invalid path", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Delete one photo",
)
async def delete_photo(
    path: Optional[str] = Query(
        default=None,
        description="URL-encoded path relative to the photo root, e.g. 2024%2Fbeach.jpg",
    ),
    service: GalleryService = Depends(get_gallery_service),
) -> DeleteResponse:
    return await service.delete_photo(path)
