"""
Photo Gallery — Gallery Service
=================================

What:  Lists photos and folders, creates folders and deletes photos.
Why:   Keeps the listing and pagination rules in one place, free of HTTP
       details, so they can be unit-tested against a temporary directory.
How:   Every call reads the directory fresh through PhotoStorage; there is no
       index or cache. Client-supplied names go through PathGuard before any
       filesystem call.

Listing algorithm (per request, O(n log n)):
    1. Directory must exist                      → NotFoundError otherwise
    2. Enumerate direct children                 (non-recursive)
    3. Keep regular files with an image extension (fixed listing set)
    4. Build a PhotoEntry per file
    5. Sort newest modification first, ties by name ascending
    6. total_pages = ceil(total_items / page_size)
    7. Slice the requested page                  (out of range → empty)

Why no cache:
    Galleries hold hundreds to low thousands of files and are also edited
    directly on the NAS. Re-reading the directory keeps results always
    fresh at the cost of a stat() per file.
"""

import logging
import math
from pathlib import Path
from typing import List, Optional, Sequence

from photo_gallery.config import Settings
from photo_gallery.exceptions import (
    ConflictError,
    FileStorageError,
    NotFoundError,
    ValidationError,
)
from photo_gallery.schemas.photo import (
    DeleteResponse,
    FolderEntry,
    PaginationResult,
    PhotoEntry,
)
from photo_gallery.services.path_guard import PathGuard
from photo_gallery.services.storage import LocalFileStorage, PhotoStorage

logger = logging.getLogger(__name__)

# What: Extensions shown in listings
# Independent of Settings.allowed_extensions, which only governs uploads
LISTING_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "bmp", "webp"})


def listing_extension(name: str) -> Optional[str]:
    """Lowercase extension of `name` if it is a listable image, else None."""
    if "." not in name:
        return None
    ext = name.rsplit(".", 1)[1].lower()
    return ext if ext in LISTING_EXTENSIONS else None


def sort_photos(entries: Sequence[PhotoEntry]) -> List[PhotoEntry]:
    """Newest modification first; equal timestamps ordered by name."""
    ordered = sorted(entries, key=lambda e: e.name)
    # list.sort is stable, also with reverse=True
    ordered.sort(key=lambda e: e.modified_at, reverse=True)
    return ordered


def paginate(entries: Sequence[PhotoEntry], page: int, page_size: int) -> PaginationResult:
    """Slice an already sorted sequence into one page."""
    total_items = len(entries)
    total_pages = math.ceil(total_items / page_size) if total_items else 0
    offset = (page - 1) * page_size
    return PaginationResult(
        items=list(entries[offset:offset + page_size]),
        current_page=page,
        total_pages=total_pages,
        total_items=total_items,
        page_size=page_size,
    )


class GalleryService:
    """
    Read and organize the photo root.

    Operations:
        list_photos()    GET    /api/photos[/{folder}]
        list_folders()   GET    /api/folders
        create_folder()  POST   /api/folders
        delete_photo()   DELETE /api/photos?path=
    """

    def __init__(
        self,
        settings: Settings,
        storage: Optional[PhotoStorage] = None,
        path_guard: Optional[PathGuard] = None,
    ):
        self.settings = settings
        self.storage = storage or LocalFileStorage()
        self.path_guard = path_guard or PathGuard(settings)
        self.root = self.path_guard.root

    # ── Listing ───────────────────────────────────────────────────────────

    def _check_pagination(self, page: int, page_size: Optional[int]) -> int:
        if page_size is None:
            page_size = self.settings.default_page_size
        if page < 1:
            raise ValidationError(message="page must be 1 or greater", field="page")
        if page_size < 1 or page_size > self.settings.max_page_size:
            raise ValidationError(
                message=f"limit must be between 1 and {self.settings.max_page_size}",
                field="limit",
            )
        return page_size

    async def list_photos(
        self,
        folder: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> PaginationResult:
        """
        One page of photos in the root (folder=None) or in one folder.

        Raises:
            InvalidPathError: folder is not a single safe folder name
                (no filesystem access)
            NotFoundError: folder does not exist
        """
        page_size = self._check_pagination(page, page_size)

        if folder is None:
            return await self.list_directory(self.root, page, page_size)

        # Folders are one level deep, like the ones create_folder makes
        directory = self.path_guard.resolve_folder(folder, field="folder")
        return await self.list_directory(directory, page, page_size, folder_label=folder)

    async def list_directory(
        self,
        directory: Path,
        page: int,
        page_size: int,
        folder_label: Optional[str] = None,
    ) -> PaginationResult:
        """Core listing over an already validated directory."""
        try:
            info = await self.storage.stat(directory)
        except FileNotFoundError:
            raise NotFoundError(resource="folder", resource_id=folder_label)
        except OSError as e:
            logger.error("Failed to stat %s: %s", directory, str(e))
            raise FileStorageError(
                message="Could not read the photo list.",
                context={"path": str(directory), "os_error": str(e)},
            )
        if not info.is_dir:
            raise NotFoundError(resource="folder", resource_id=folder_label)

        entries = await self._collect_photos(directory, folder_label)
        result = paginate(sort_photos(entries), page, page_size)

        logger.debug(
            "Listed %s: page %d/%d (%d items total)",
            folder_label or "<root>",
            page,
            result.total_pages,
            result.total_items,
        )
        return result

    async def _collect_photos(self, directory: Path, folder_label: Optional[str]) -> List[PhotoEntry]:
        try:
            names = await self.storage.list_directory(directory)
        except OSError as e:
            logger.error("Failed to read directory %s: %s", directory, str(e))
            raise FileStorageError(
                message="Could not read the photo list.",
                context={"path": str(directory), "os_error": str(e)},
            )

        entries: List[PhotoEntry] = []
        for name in names:
            extension = listing_extension(name)
            if extension is None:
                continue
            try:
                info = await self.storage.stat(directory / name)
            except FileNotFoundError:
                # Removed between listdir() and stat()
                logger.debug("Skipping vanished file: %s", name)
                continue
            except OSError as e:
                logger.warning("Skipping unreadable file %s: %s", name, str(e))
                continue
            if not info.is_file:
                continue

            entries.append(
                PhotoEntry(
                    name=name,
                    relative_path=f"{folder_label}/{name}" if folder_label else name,
                    size_bytes=info.size,
                    created_at=info.created_at,
                    modified_at=info.modified_at,
                    extension=extension,
                )
            )
        return entries

    async def list_folders(self) -> List[FolderEntry]:
        """
        First-level subdirectories of the root, newest modification first.

        Hidden entries (leading dot) are skipped. Not paginated.
        """
        try:
            names = await self.storage.list_directory(self.root)
        except OSError as e:
            logger.error("Failed to read photo root %s: %s", self.root, str(e))
            raise FileStorageError(
                message="Could not read the folder list.",
                context={"path": str(self.root), "os_error": str(e)},
            )

        folders: List[FolderEntry] = []
        for name in names:
            if name.startswith("."):
                continue
            try:
                info = await self.storage.stat(self.root / name)
            except OSError:
                continue
            if not info.is_dir:
                continue
            folders.append(
                FolderEntry(
                    name=name,
                    relative_path=name,
                    created_at=info.created_at,
                    modified_at=info.modified_at,
                )
            )

        folders.sort(key=lambda f: f.name)
        folders.sort(key=lambda f: f.modified_at, reverse=True)
        return folders

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_folder(self, name: Optional[str]) -> FolderEntry:
        """
        Create one folder directly under the root.

        Raises:
            ValidationError: name missing or blank
            InvalidPathError: traversal or a path separator in the name
            ConflictError: the folder already exists
        """
        if name is None or not name.strip():
            raise ValidationError(message="Folder name is required", field="name")

        folder_name = name.strip()
        target = self.path_guard.resolve_folder(folder_name, field="name")

        if await self.storage.exists(target):
            raise ConflictError(
                message="A folder with this name already exists",
                context={"name": folder_name},
            )

        try:
            await self.storage.create_directory(target)
            info = await self.storage.stat(target)
        except FileExistsError:
            # Lost a race with another request creating the same folder
            raise ConflictError(
                message="A folder with this name already exists",
                context={"name": folder_name},
            )
        except OSError as e:
            logger.error("Failed to create folder %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to create the folder.",
                context={"path": str(target), "os_error": str(e)},
            )

        logger.info("Folder created: %s", folder_name)
        return FolderEntry(
            name=folder_name,
            relative_path=folder_name,
            created_at=info.created_at,
            modified_at=info.modified_at,
        )

    async def delete_photo(self, path: Optional[str]) -> DeleteResponse:
        """
        Delete one file addressed relative to the root.

        Raises:
            ValidationError: path missing
            InvalidPathError: traversal attempt (nothing touched on disk)
            NotFoundError: no regular file at that path
        """
        if path is None or not path.strip():
            raise ValidationError(message="A file path is required", field="path")

        target = self.path_guard.resolve(path, field="path")

        try:
            info = await self.storage.stat(target)
        except FileNotFoundError:
            raise NotFoundError(resource="file", resource_id=path)
        except OSError as e:
            logger.error("Failed to stat %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to delete the file.",
                context={"path": str(target), "os_error": str(e)},
            )
        if not info.is_file:
            raise NotFoundError(resource="file", resource_id=path)

        try:
            await self.storage.delete_file(target)
        except FileNotFoundError:
            raise NotFoundError(resource="file", resource_id=path)
        except OSError as e:
            logger.error("Failed to delete %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to delete the file.",
                context={"path": str(target), "os_error": str(e)},
            )

        relative = self.path_guard.normalize(path)
        logger.info("File deleted: %s", relative)
        return DeleteResponse(message="Photo deleted", deleted_path=relative)
