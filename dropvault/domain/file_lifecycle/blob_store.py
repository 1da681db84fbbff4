"""
Blob Store Interface

Abstract interface for the raw bytes of uploaded files.
Keeps the domain layer storage-agnostic: the engine only ever names a blob
by identifier plus extension, never by the uploader's filename.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Iterator, Optional


@dataclass(frozen=True)
class BlobInfo:
    """Listing entry for one stored blob."""
    name: str
    size_bytes: int
    modified_at: datetime

    @property
    def file_id(self) -> str:
        """Identifier part of the blob name (everything before the first dot)."""
        return self.name.split(".", 1)[0]


class IBlobStore(ABC):
    """
    Write-once byte storage keyed by identifier + extension.

    Contract Guarantees:
    - write() never leaves a partially written blob visible to readers
    - open() raises BlobNotFoundError for missing blobs
    - delete() is idempotent; deleting a missing blob is not an error
    - exists() and get_size() never raise for missing blobs

    Thread Safety:
    - Implementations must allow concurrent reads and writes of
      different blobs
    """

    @abstractmethod
    def write(self, file_id: str, extension: str, content: BinaryIO) -> int:
        """
        Store content exactly once.

        Args:
            file_id: Allocated file identifier
            extension: Safe extension, e.g. '.pdf' or ''
            content: Binary stream positioned at the start

        Returns:
            Number of bytes written

        Raises:
            StorageWriteError: If the medium is unwritable or the blob exists
        """
        pass  # pragma: no cover

    @abstractmethod
    def open(self, file_id: str, extension: str) -> BinaryIO:
        """
        Open a blob for reading. The caller closes the stream.

        Raises:
            BlobNotFoundError: If the blob does not exist
            StorageError: On any other read failure
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, file_id: str, extension: str) -> bool:
        """
        Delete a blob.

        Returns:
            True if a blob was removed, False if it was already absent

        Raises:
            StorageError: If an existing blob could not be removed
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, file_id: str, extension: str) -> bool:
        pass  # pragma: no cover

    @abstractmethod
    def get_size(self, file_id: str, extension: str) -> Optional[int]:
        """Size in bytes, or None if the blob does not exist."""
        pass  # pragma: no cover

    @abstractmethod
    def list_blobs(self) -> Iterator[BlobInfo]:
        """Iterate over all published blobs (in-flight writes excluded)."""
        pass  # pragma: no cover

    @abstractmethod
    def delete_by_name(self, name: str) -> bool:
        """Idempotent delete of a listed blob, used by the orphan sweep."""
        pass  # pragma: no cover
