"""
Photo Gallery — System & Health Routes
========================================

What:  GET /api/system (server metadata for the frontend's settings view)
       and GET /health (probe for Docker and load balancers).
Why:   The frontend shows the upload limits it must respect; orchestration
       needs to know whether the photo volume is mounted.
"""

import logging
import platform
import time

from fastapi import APIRouter, Depends, Response

from photo_gallery import __version__
from photo_gallery.config import Settings
from photo_gallery.dependencies import get_gallery_service, get_settings_dep
from photo_gallery.schemas.photo import HealthResponse, SystemInfoResponse
from photo_gallery.services.gallery_service import GalleryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])

# Track when the service started for uptime reporting
_start_time = time.time()


def uptime_seconds() -> float:
    return round(time.time() - _start_time, 2)


@router.get(
    "/api/system",
    response_model=SystemInfoResponse,
    summary="Server metadata",
    description="Uptime, environment label, photo root and the configured upload limits.",
)
async def system_info(
    settings: Settings = Depends(get_settings_dep),
) -> SystemInfoResponse:
    return SystemInfoResponse(
        python_version=platform.python_version(),
        version=__version__,
        uptime=uptime_seconds(),
        environment=settings.environment,
        photo_dir=settings.photo_dir,
        max_file_size=settings.max_file_size,
        max_files=settings.max_files,
        allowed_extensions=settings.allowed_extensions_list,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Photo root unavailable", "model": HealthResponse}},
)
async def health_check(
    response: Response,
    service: GalleryService = Depends(get_gallery_service),
) -> HealthResponse:
    """
    Healthy when the photo root exists and is a directory.

    Uses a single stat() so it stays cheap at probe frequency.
    """
    photo_dir_status = "accessible"
    overall = "healthy"

    try:
        info = await service.storage.stat(service.root)
        if not info.is_dir:
            photo_dir_status = "unavailable"
    except OSError as e:
        photo_dir_status = "unavailable"
        logger.warning("Health check: photo root unreachable: %s", str(e))

    if photo_dir_status != "accessible":
        overall = "unhealthy"
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        photo_dir=photo_dir_status,
        uptime_seconds=uptime_seconds(),
    )
