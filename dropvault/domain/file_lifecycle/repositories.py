"""
File Record Repository Interface

Abstract interface for file metadata persistence.
Infrastructure implementations depend on this domain-defined contract.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..identity import Owner
from .entities import FileRecord


class IFileRecordRepository(ABC):
    """
    Durable store of FileRecords keyed by identifier.

    Contract Guarantees:
    - create() never overwrites an existing identifier
    - increment_download_count() is a single atomic read-modify-write
    - find_by_owner() is ordered by upload time, most recent first
    - find_all_expired_before() is a store-side filtered query (strict <)

    Failures to reach the store raise MetadataStoreError.
    """

    @abstractmethod
    def create(self, record: FileRecord) -> FileRecord:
        """
        Insert a new record.

        Raises:
            DuplicateFileIdError: If the identifier is already taken
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_by_id(self, file_id: str) -> Optional[FileRecord]:
        """Point lookup. The owner, if any, carries only its user_id."""
        pass  # pragma: no cover

    @abstractmethod
    def find_by_id_with_owner(self, file_id: str) -> Optional[FileRecord]:
        """Point lookup with the owner's display name resolved."""
        pass  # pragma: no cover

    @abstractmethod
    def find_by_owner(self, owner: Owner) -> List[FileRecord]:
        """All records owned by owner, most recent upload first."""
        pass  # pragma: no cover

    @abstractmethod
    def find_by_id_and_owner(self, file_id: str, owner: Owner) -> Optional[FileRecord]:
        """Point lookup that only matches when owner owns the record."""
        pass  # pragma: no cover

    @abstractmethod
    def exists_by_id(self, file_id: str) -> bool:
        pass  # pragma: no cover

    @abstractmethod
    def update(self, record: FileRecord) -> FileRecord:
        """Save-as-upsert."""
        pass  # pragma: no cover

    @abstractmethod
    def increment_download_count(self, file_id: str, limit: int) -> Optional[int]:
        """
        Atomically increment download_count unless it has reached limit.

        Returns:
            The new download count, or None if the count was already >= limit

        Raises:
            FileRecordNotFoundError: If the record no longer exists
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, record: FileRecord) -> bool:
        """
        Delete a record and its index entries.

        Returns:
            True if the record existed, False if it was already gone
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_all_expired_before(self, timestamp: datetime) -> List[FileRecord]:
        """All records with expires_at strictly before timestamp."""
        pass  # pragma: no cover
