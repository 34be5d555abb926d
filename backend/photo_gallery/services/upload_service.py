"""
Photo Gallery — Upload Service
================================

What:  Recovers readable upload file names, checks file types and limits,
       generates stored names and writes the files.
Why:   Upload handling is the only write path driven by client input, so
       every rule (type, size, count, target folder, name safety) lives here.
How:   A small set of pure naming functions plus UploadService, which runs the
       per-file pipeline and reports partial success.

Name recovery:
    Browsers and multipart libraries sometimes hand over a UTF-8 file name
    decoded as latin-1 (one byte per character), turning "여름 휴가.jpg" into
    "ì\x97¬ë¦\x84 í\x9c´ê°\x80.jpg". Re-encoding as latin-1 and decoding as
    UTF-8 restores the original. The step is heuristic: when either half
    fails (the name was already decoded correctly, or it was never UTF-8)
    the received name is kept unchanged.

Stored name:
    "{YYYY-MM-DD_HH-MM-SS}_{sanitized base}{lowercased extension}"
    e.g. "2024-07-01_09-30-15_여름_휴가.jpg"

    Two uploads of the same name within the same second produce the same
    stored name; the second write replaces the first (last write wins).
    Collisions are neither detected nor suffixed.

Per-file pipeline (in order, cheapest check first):
    1. Recover original name
    2. Extension in allowed set AND content type image/*
    3. Bounded read (max_file_size + 1 bytes) to enforce the size limit
    4. Write to {root}/{folder}/{stored name}

There is no transaction: files written before a later failure stay on disk
and are reported as uploaded.
"""

import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from fastapi import UploadFile

from photo_gallery.config import Settings
from photo_gallery.exceptions import (
    FileStorageError,
    PayloadTooLargeError,
    PhotoGalleryError,
    TooManyFilesError,
    UnsupportedMediaTypeError,
    ValidationError,
)
from photo_gallery.schemas.photo import UploadFailure, UploadResponse, UploadResult
from photo_gallery.services.path_guard import PathGuard
from photo_gallery.services.storage import LocalFileStorage, PhotoStorage

logger = logging.getLogger(__name__)

# Characters rejected by common filesystems (Windows being the strictest)
ILLEGAL_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
WHITESPACE_RUN = re.compile(r"\s+")

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
IMAGE_CONTENT_TYPE_PREFIX = "image/"


# ══════════════════════════════════════════════════════════════════════════
# Naming
# ══════════════════════════════════════════════════════════════════════════

def decode_original_name(raw_name: Union[str, bytes]) -> str:
    """
    Recover the human-readable file name the client meant to send.

    str input is treated as bytes that were decoded one byte per character;
    bytes input is decoded as UTF-8 directly. Falls back to the received
    name (bytes mapped 1:1 through latin-1) if UTF-8 decoding fails.
    """
    if isinstance(raw_name, bytes):
        try:
            return raw_name.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("File name is not valid UTF-8, keeping raw bytes")
            return raw_name.decode("latin-1")

    try:
        return raw_name.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return raw_name


def timestamp_token(now: Optional[datetime] = None) -> str:
    """Fixed-width, filesystem-safe UTC timestamp without fractional seconds."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime(TIMESTAMP_FORMAT)


def split_extension(name: str) -> Tuple[str, str]:
    """
    Split at the last dot; the extension keeps its dot and is lowercased.

    Dot-files such as ".hidden" have no extension.
    """
    base, ext = os.path.splitext(name)
    return base, ext.lower()


def sanitize_base_name(base: str) -> str:
    """Drop characters illegal on common filesystems and turn whitespace runs into "_"."""
    return WHITESPACE_RUN.sub("_", ILLEGAL_FILENAME_CHARS.sub("", base))


def build_stored_name(original_name: str, now: Optional[datetime] = None) -> str:
    base, ext = split_extension(original_name)
    safe_ext = ILLEGAL_FILENAME_CHARS.sub("", WHITESPACE_RUN.sub("", ext))
    return f"{timestamp_token(now)}_{sanitize_base_name(base)}{safe_ext}"


def compute_stored_name(raw_name: Union[str, bytes], now: Optional[datetime] = None) -> str:
    """Stored file name for a raw client file name (recovery + sanitizing + timestamp)."""
    return build_stored_name(decode_original_name(raw_name), now)


def upload_extension(original_name: str) -> str:
    """Lowercase extension without the dot, "" when there is none."""
    return split_extension(original_name)[1].lstrip(".")


def check_file_type(
    original_name: str,
    content_type: Optional[str],
    allowed_extensions: Iterable[str],
) -> None:
    """
    Accept only allowed extensions that are also declared as images.

    Raises:
        UnsupportedMediaTypeError naming the allowed set.
    """
    allowed = list(allowed_extensions)
    ext = upload_extension(original_name)
    is_image = bool(content_type) and content_type.lower().startswith(IMAGE_CONTENT_TYPE_PREFIX)

    if ext not in allowed or not is_image:
        raise UnsupportedMediaTypeError(
            allowed=allowed,
            filename=original_name,
            content_type=content_type,
        )


# ══════════════════════════════════════════════════════════════════════════
# Upload Workflow
# ══════════════════════════════════════════════════════════════════════════

class UploadService:
    """
    Stores multipart uploads under a folder of the photo root.

    Limits come from Settings: max_files per request, max_file_size per
    file, allowed_extensions_list for types.
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

    def validate_size(self, size: int, filename: Optional[str] = None) -> None:
        if size > self.settings.max_file_size:
            raise PayloadTooLargeError(max_size=self.settings.max_file_size, filename=filename)

    async def _read_bounded(self, upload: UploadFile, original_name: str) -> bytes:
        # Reject early when the multipart parser already knows the size
        if upload.size is not None:
            self.validate_size(upload.size, original_name)

        # Never hold more than one byte past the limit in memory
        content = await upload.read(self.settings.max_file_size + 1)
        self.validate_size(len(content), original_name)
        return content

    async def _ensure_folder(self, directory: Path) -> None:
        try:
            await self.storage.create_directory(directory, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create upload folder %s: %s", directory, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(directory), "os_error": str(e)},
            )

    async def store_file(
        self,
        upload: UploadFile,
        directory: Path,
        folder: str,
    ) -> UploadResult:
        """Run the per-file pipeline for one upload and write it."""
        original_name = decode_original_name(upload.filename or "")

        check_file_type(original_name, upload.content_type, self.settings.allowed_extensions_list)
        content = await self._read_bounded(upload, original_name)

        stored_name = build_stored_name(original_name)
        await self._ensure_folder(directory)
        target = directory / stored_name

        try:
            await self.storage.write_file(target, content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", target, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(target), "os_error": str(e)},
            )

        logger.info("File stored: %s/%s (%d bytes)", folder, stored_name, len(content))
        return UploadResult(
            original_name=original_name,
            stored_name=stored_name,
            size_bytes=len(content),
            folder=folder,
            relative_path=f"{folder}/{stored_name}",
        )

    async def store_uploads(
        self,
        uploads: Optional[Sequence[UploadFile]],
        folder: Optional[str] = None,
    ) -> UploadResponse:
        """
        Store every upload of one request.

        Request-level checks (no files, too many files, invalid folder) fail
        the whole request before anything is written. After that each file
        succeeds or fails on its own. If none succeeded, the first failure is
        raised so a single rejected file keeps its specific error.
        """
        if not uploads:
            raise ValidationError(message="No files to upload", field="photos")

        if len(uploads) > self.settings.max_files:
            raise TooManyFilesError(max_files=self.settings.max_files, received=len(uploads))

        folder_name = (folder or "").strip() or self.settings.default_folder
        directory = self.path_guard.resolve_folder(folder_name, field="folder")

        stored: List[UploadResult] = []
        failed: List[UploadFailure] = []
        first_error: Optional[PhotoGalleryError] = None

        for upload in uploads:
            try:
                stored.append(await self.store_file(upload, directory, folder_name))
            except PhotoGalleryError as e:
                name = decode_original_name(upload.filename or "")
                logger.warning("Upload of %r rejected: %s", name, e.message)
                failed.append(UploadFailure(original_name=name, error=e.error_code, message=e.message))
                if first_error is None:
                    first_error = e

        if not stored:
            raise first_error

        logger.info(
            "%d file(s) uploaded to %s: %s",
            len(stored),
            folder_name,
            [f.original_name for f in stored],
        )
        message = f"{len(stored)} file(s) uploaded"
        if failed:
            message += f", {len(failed)} failed"
        return UploadResponse(success=True, message=message, files=stored, failed=failed)
