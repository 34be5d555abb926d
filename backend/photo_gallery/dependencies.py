"""
Photo Gallery — Request Dependencies
======================================

What:  FastAPI dependency providers for the services built by create_app().
Why:   Services hold the application's Settings; handing them out through
       Depends() keeps route handlers free of globals and lets tests build
       isolated apps (each with its own photo root).
How:   create_app() stores the instances on app.state; these functions read
       them back from the current request.
"""

from fastapi import Request

from photo_gallery.config import Settings
from photo_gallery.services.gallery_service import GalleryService
from photo_gallery.services.upload_service import UploadService


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_gallery_service(request: Request) -> GalleryService:
    return request.app.state.gallery_service


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service
