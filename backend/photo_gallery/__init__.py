"""
Photo Gallery — Package Initializer
=====================================

A small photo-gallery file server: folders of images on disk, listed with
pagination, uploaded through multipart forms, deleted and served read-only.

Architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  ← PathGuard, GalleryService,
    │                                     │    UploadService
    ├─────────────────────────────────────┤
    │        Schemas (API contract)       │  ← Pydantic models
    ├─────────────────────────────────────┤
    │     PhotoStorage (Filesystem)       │  ← the only code touching disk
    └─────────────────────────────────────┘

There is no database: the photo directory is the single source of truth and
is read fresh on every request.
"""

__version__ = "1.0.0"
