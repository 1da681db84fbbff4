"""
Local Blob Store Implementation

Concrete implementation of IBlobStore on the local filesystem.
Blobs live flat in one directory, named {file_id}{extension}. Writes go to
a hidden temporary file first and are published with a hard link, so a
reader never observes a half-written blob and an existing blob is never
replaced.
"""

import logging
import os
import re
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from dropvault.domain.errors import BlobNotFoundError, StorageError, StorageWriteError
from dropvault.domain.file_lifecycle.blob_store import BlobInfo, IBlobStore
from dropvault.domain.file_lifecycle.value_objects import blob_name, extension_of

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".upload-"
CHUNK_SIZE = 64 * 1024

_FILE_ID = re.compile(r"[A-Za-z0-9][A-Za-z0-9-]*")


class LocalBlobStore(IBlobStore):
    """
    Local filesystem implementation of IBlobStore.

    Thread Safety:
        Concurrent reads are safe. Each write uses its own temporary file,
        and of two concurrent writes of the same blob exactly one succeeds.

    Attributes:
        base_path: Directory holding every blob
    """

    def __init__(self, base_path: str = "/tmp/dropvault"):
        """
        Initialize the local blob store.

        Args:
            base_path: Storage directory, created if missing

        Raises:
            StorageError: If the directory cannot be created
        """
        self.base_path = Path(base_path)
        self._ensure_base_directory()

    def _ensure_base_directory(self) -> None:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Failed to create storage directory: {self.base_path}", e
            ) from e

    def _path_for(self, file_id: str, extension: str) -> Path:
        """Resolve a blob path, refusing anything that is not a plain blob name."""
        if not file_id or not _FILE_ID.fullmatch(file_id):
            raise StorageError(f"Invalid file id for blob storage: {file_id!r}")
        if extension and extension_of(extension) != extension:
            raise StorageError(f"Invalid blob extension: {extension!r}")
        return self.base_path / blob_name(file_id, extension)

    def _path_for_name(self, name: str) -> Path:
        file_id, dot, rest = name.partition(".")
        return self._path_for(file_id, f"{dot}{rest}")

    def write(self, file_id: str, extension: str, content: BinaryIO) -> int:
        target = self._path_for(file_id, extension)
        if target.exists():
            raise StorageWriteError(f"Blob already exists: {target.name}")

        try:
            fd, temp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=self.base_path)
        except OSError as e:
            raise StorageWriteError(f"Storage directory is not writable: {e}", e) from e

        try:
            with os.fdopen(fd, "wb") as f:
                shutil.copyfileobj(content, f, CHUNK_SIZE)
                f.flush()
                os.fsync(f.fileno())
            written = os.path.getsize(temp_path)
            # Unlike os.replace, link fails if the target already exists
            os.link(temp_path, target)
        except FileExistsError as e:
            raise StorageWriteError(f"Blob already exists: {target.name}", e) from e
        except OSError as e:
            raise StorageWriteError(f"Failed to write blob {target.name}: {e}", e) from e
        finally:
            self._remove_quietly(temp_path)

        logger.debug(f"Wrote blob {target.name} ({written} bytes)")
        return written

    @staticmethod
    def _remove_quietly(path: str) -> None:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temporary upload {path}: {e}")

    def open(self, file_id: str, extension: str) -> BinaryIO:
        path = self._path_for(file_id, extension)
        try:
            return open(path, "rb")
        except FileNotFoundError as e:
            raise BlobNotFoundError(f"Blob not found: {path.name}", e) from e
        except OSError as e:
            raise StorageError(f"Failed to open blob {path.name}: {e}", e) from e

    def delete(self, file_id: str, extension: str) -> bool:
        return self._unlink(self._path_for(file_id, extension))

    def delete_by_name(self, name: str) -> bool:
        return self._unlink(self._path_for_name(name))

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete blob {path.name}: {e}", e) from e

    def exists(self, file_id: str, extension: str) -> bool:
        try:
            return self._path_for(file_id, extension).is_file()
        except (StorageError, OSError):
            return False

    def get_size(self, file_id: str, extension: str) -> Optional[int]:
        try:
            return self._path_for(file_id, extension).stat().st_size
        except (StorageError, OSError):
            return None

    def list_blobs(self) -> Iterator[BlobInfo]:
        try:
            entries = list(os.scandir(self.base_path))
        except OSError as e:
            raise StorageError(f"Failed to list storage directory: {e}", e) from e

        for entry in entries:
            if entry.name.startswith(TEMP_PREFIX) or not entry.is_file():
                continue
            try:
                stat = entry.stat()
            except FileNotFoundError:
                # Deleted between scandir and stat
                continue
            yield BlobInfo(
                name=entry.name,
                size_bytes=stat.st_size,
                modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            )
