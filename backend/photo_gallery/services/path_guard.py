"""
Photo Gallery — Path Guard
============================

What:  Validates user-supplied relative paths and folder names against the
       configured photo root.
Why:   Folder names in listing requests, folder-creation names and delete
       paths all come from the client. Any of them could carry `..` segments
       to reach outside the root (e.g. `../../etc/passwd`).
How:   Purely syntactic normalization first (no filesystem lookup), so a
       rejected input never reaches the disk. Only inputs that pass are joined
       with the root, and the joined path is resolved once more as a second
       line of defence against symlinks pointing outside the root.

Validation rules:
    1. Percent-decode until the value stops changing (catches %2e%2e and
       double-encoded %252e%252e)
    2. Backslashes become forward slashes (mixed-separator variants)
    3. Any `..` segment rejects the input, wherever it appears

Normalization (the path actually looked up):
    Works on the value as received; the framework has already decoded it
    once, so a literal "%20" in a file name stays "%20". Backslashes become
    forward slashes, `.` and empty segments collapse and leading slashes
    are dropped so an absolute input is read relative to the root.
"""

import logging
import posixpath
from pathlib import Path
from urllib.parse import unquote

from photo_gallery.config import Settings
from photo_gallery.exceptions import InvalidPathError

logger = logging.getLogger(__name__)

# Enough for any realistic multi-encoding; more rounds than this is itself suspicious
MAX_DECODE_ROUNDS = 5

PARENT_SEGMENT = ".."
SEPARATORS = ("/", "\\")


class PathGuard:
    """Traversal checks for paths relative to the photo root."""

    def __init__(self, settings: Settings):
        self.root = Path(settings.photo_dir).resolve()

    @staticmethod
    def _decode(raw: str) -> str:
        decoded = raw
        for _ in range(MAX_DECODE_ROUNDS):
            candidate = unquote(decoded)
            if candidate == decoded:
                break
            decoded = candidate
        return decoded.replace("\\", "/")

    def normalize(self, raw: str) -> str:
        """
        Syntactic normal form of `raw`, relative to the root. Percent
        sequences are kept as they are.

        Does not check for traversal; call validate() first. Returns "." for
        the root itself.
        """
        normalized = posixpath.normpath(raw.replace("\\", "/")).lstrip("/")
        return normalized or "."

    def validate(self, raw: str) -> bool:
        """
        True if `raw` cannot reference anything outside the root.

        Rejects empty input, NUL bytes and any `..` segment, whether it
        appears in the raw (decoded) form or survives normalization.
        """
        if raw is None or not raw.strip():
            return False

        decoded = self._decode(raw)
        if "\x00" in decoded:
            return False
        if PARENT_SEGMENT in decoded.split("/"):
            return False

        normalized = posixpath.normpath(decoded)
        return PARENT_SEGMENT not in normalized.split("/")

    def validate_folder_name(self, name: str) -> bool:
        """validate() plus: exactly one segment, no slash of either kind."""
        if not self.validate(name):
            return False
        if any(sep in name for sep in SEPARATORS):
            return False
        # _decode() maps encoded and backslash separators to "/"
        decoded = self._decode(name)
        return "/" not in decoded and decoded.strip() != "."

    def _confine(self, relative: str, raw: str) -> Path:
        target = (self.root / relative).resolve()
        if target != self.root and self.root not in target.parents:
            logger.warning("Path escapes photo root after resolution: %r", raw)
            raise InvalidPathError(path=raw)
        return target

    def resolve(self, raw: str, field: str = "path") -> Path:
        """
        Absolute path for a validated relative path.

        Raises:
            InvalidPathError: before any filesystem access when the input
                fails validate(); after resolution when a symlink leads
                outside the root.
        """
        if not self.validate(raw):
            logger.warning("Rejected path: %r", raw)
            raise InvalidPathError(path=raw, field=field)
        return self._confine(self.normalize(raw), raw)

    def resolve_folder(self, name: str, field: str = "folder") -> Path:
        """Like resolve(), restricted to a single folder directly under the root."""
        if not self.validate_folder_name(name):
            logger.warning("Rejected folder name: %r", name)
            raise InvalidPathError(message="Invalid folder name", path=name, field=field)
        return self._confine(self.normalize(name), name)
