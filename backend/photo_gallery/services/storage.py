"""
Photo Gallery — Filesystem Capability Layer
=============================================

What:  The narrow interface through which every service touches the disk.
Why:   Listing, naming and path validation stay pure logic; the only
       capabilities they need are read-directory, stat, exists, write-file,
       delete-file and create-directory. Keeping them behind one class means
       locking or a transactional layer can be added later without touching
       the gallery or upload logic.
How:   PhotoStorage is the abstract contract; LocalFileStorage implements it
       with aiofiles so blocking syscalls run in a worker thread instead of
       on the event loop.

Consistency:
    There is no locking. The filesystem is the single source of truth and is
    read fresh on each call; concurrent writers to the same path race on a
    last-write-wins basis.

Errors:
    OSError subclasses propagate unchanged (FileNotFoundError,
    FileExistsError, PermissionError, ...). Services decide which of them are
    client errors and which become FileStorageError.
"""

import stat as stat_module
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os


@dataclass(frozen=True)
class EntryStat:
    """Metadata snapshot of one directory entry."""

    size: int
    created_at: datetime
    modified_at: datetime
    is_file: bool
    is_dir: bool

    @classmethod
    def from_os_stat(cls, st) -> "EntryStat":
        # st_birthtime only exists on macOS/BSD; Linux falls back to ctime
        created = getattr(st, "st_birthtime", st.st_ctime)
        return cls(
            size=st.st_size,
            created_at=datetime.fromtimestamp(created, tz=timezone.utc),
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            is_file=stat_module.S_ISREG(st.st_mode),
            is_dir=stat_module.S_ISDIR(st.st_mode),
        )


class PhotoStorage(ABC):
    """Filesystem capabilities required by the gallery services."""

    @abstractmethod
    async def list_directory(self, path: Path) -> List[str]:
        """Names of the direct children of `path` (non-recursive, unordered)."""

    @abstractmethod
    async def stat(self, path: Path) -> EntryStat:
        """Metadata of `path`. Raises FileNotFoundError if absent."""

    @abstractmethod
    async def exists(self, path: Path) -> bool:
        ...

    @abstractmethod
    async def write_file(self, path: Path, content: bytes) -> None:
        """Create or overwrite `path` with `content`."""

    @abstractmethod
    async def delete_file(self, path: Path) -> None:
        ...

    @abstractmethod
    async def create_directory(self, path: Path, exist_ok: bool = False) -> None:
        """Create `path`. Raises FileExistsError unless `exist_ok`."""


class LocalFileStorage(PhotoStorage):
    """PhotoStorage backed by the local filesystem."""

    async def list_directory(self, path: Path) -> List[str]:
        return await aiofiles.os.listdir(path)

    async def stat(self, path: Path) -> EntryStat:
        st = await aiofiles.os.stat(path)
        return EntryStat.from_os_stat(st)

    async def exists(self, path: Path) -> bool:
        return await aiofiles.os.path.exists(path)

    async def write_file(self, path: Path, content: bytes) -> None:
        # 'wb' truncates: an existing file with the same name is replaced
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

    async def delete_file(self, path: Path) -> None:
        await aiofiles.os.remove(path)

    async def create_directory(self, path: Path, exist_ok: bool = False) -> None:
        if exist_ok:
            await aiofiles.os.makedirs(path, exist_ok=True)
        else:
            await aiofiles.os.mkdir(path)
