"""
Photo Gallery — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the gallery's error scenarios.
Why:   Services raise meaningful errors; a single set of global handlers
       (registered in main.py) maps them to HTTP status codes and a JSON
       body with an `error` field. Nothing internal leaks to the client.
How:   Each exception carries a user-facing message and an optional context
       dict that is logged server-side only.

Exception Hierarchy:
    PhotoGalleryError (base)
    ├── ValidationError              → 400 Bad Request (client can fix)
    │   ├── InvalidPathError         → 400 (traversal or malformed path)
    │   ├── UnsupportedMediaTypeError→ 400 (extension / content type refused)
    │   └── UploadLimitError
    │       ├── PayloadTooLargeError → 400 (file over max_file_size)
    │       └── TooManyFilesError    → 400 (more than max_files per request)
    ├── NotFoundError                → 404 Not Found
    ├── ConflictError                → 409 Conflict
    └── FileStorageError             → 500 Internal Server Error
"""

from typing import Any, Dict, Iterable, Optional


class PhotoGalleryError(Exception):
    """
    Base exception for all gallery errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for 4xx errors)
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PhotoGalleryError):
    """
    Raised when client input fails validation.

    HTTP: 400 Bad Request. Covers missing form fields, missing query
    parameters and empty folder names.
    """

    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidPathError(ValidationError):
    """
    Raised by PathGuard when a path or folder name could escape the photo root.

    Raised before any filesystem call is made for the offending input.
    """

    error_code = "invalid_path"

    def __init__(
        self,
        message: str = "Invalid path",
        path: Optional[str] = None,
        field: Optional[str] = None,
    ):
        ctx: Dict[str, Any] = {}
        if path is not None:
            ctx["path"] = path
        super().__init__(message=message, field=field, context=ctx)
        self.path = path


class UnsupportedMediaTypeError(ValidationError):
    """Raised when an uploaded file's extension or content type is not accepted."""

    error_code = "unsupported_media_type"

    def __init__(
        self,
        allowed: Iterable[str],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ):
        allowed = list(allowed)
        message = f"File type is not allowed. Allowed types: {', '.join(allowed)}"
        ctx: Dict[str, Any] = {"allowed": allowed}
        if filename is not None:
            ctx["filename"] = filename
        if content_type is not None:
            ctx["content_type"] = content_type
        super().__init__(message=message, field="photos", context=ctx)
        self.allowed = allowed


class UploadLimitError(ValidationError):
    """Base for upload size/count limit violations."""


class PayloadTooLargeError(UploadLimitError):
    """Raised when a single uploaded file exceeds max_file_size."""

    error_code = "payload_too_large"

    def __init__(self, max_size: int, filename: Optional[str] = None):
        max_mb = max_size / (1024 * 1024)
        message = f"File is too large. Maximum allowed size is {max_mb:g}MB."
        ctx: Dict[str, Any] = {"max_size": max_size}
        if filename is not None:
            ctx["filename"] = filename
        super().__init__(message=message, field="photos", context=ctx)
        self.max_size = max_size


class TooManyFilesError(UploadLimitError):
    """Raised when a single request carries more than max_files files."""

    error_code = "too_many_files"

    def __init__(self, max_files: int, received: Optional[int] = None):
        message = f"You can upload at most {max_files} files at once."
        ctx: Dict[str, Any] = {"max_files": max_files}
        if received is not None:
            ctx["received"] = received
        super().__init__(message=message, field="photos", context=ctx)
        self.max_files = max_files


class NotFoundError(PhotoGalleryError):
    """
    Raised when a requested folder or photo does not exist.

    HTTP: 404 Not Found
    """

    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(PhotoGalleryError):
    """
    Raised when creating something that already exists (a folder).

    HTTP: 409 Conflict
    """

    error_code = "conflict"

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(PhotoGalleryError):
    """
    Raised when file system operations fail.

    What:    Could not read, write, or delete on the photo volume.
    When:    Disk full, permission denied, I/O error.
    HTTP:    500 Internal Server Error

    The response carries a generic message; the OS error and path are only
    logged.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
