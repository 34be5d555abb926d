# Services package init
"""
Photo Gallery — Services Layer
================================

Business logic between routes (HTTP) and the filesystem.

Service Inventory:
    - PathGuard:      traversal checks for client-supplied paths and folder names
    - GalleryService: photo/folder listing, pagination, folder creation, deletion
    - UploadService:  file name recovery, stored-name generation, upload checks
    - PhotoStorage:   the filesystem capabilities the services are allowed to use
"""
