"""
Mock Repository Implementations

In-memory implementations of the metadata store and blob store interfaces
for unit testing. Provides realistic behavior with inspection methods and
failure switches for test assertions.
"""

import threading
from datetime import datetime, timezone
from io import BytesIO
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Set

from dropvault.domain.errors import (
    BlobNotFoundError,
    DuplicateFileIdError,
    FileRecordNotFoundError,
    MetadataStoreError,
    StorageError,
    StorageWriteError,
)
from dropvault.domain.file_lifecycle.blob_store import BlobInfo, IBlobStore
from dropvault.domain.file_lifecycle.entities import FileRecord
from dropvault.domain.file_lifecycle.repositories import IFileRecordRepository
from dropvault.domain.file_lifecycle.value_objects import blob_name
from dropvault.domain.identity import Owner


class MockFileRecordRepository(IFileRecordRepository):
    """
    In-memory implementation of IFileRecordRepository.

    A lock stands in for the store-side atomicity of the Redis scripts.

    Failure switches:
        fail_on_create: create() raises MetadataStoreError
        fail_on_delete: delete() raises MetadataStoreError for these ids
        taken_ids: ids reported as existing without a stored record
    """

    def __init__(self):
        self._storage: Dict[str, FileRecord] = {}
        self._usernames: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._call_history: List[Dict[str, Any]] = []
        self.fail_on_create = False
        self.fail_on_delete: Set[str] = set()
        self.taken_ids: Set[str] = set()

    def create(self, record: FileRecord) -> FileRecord:
        self._call_history.append({"method": "create", "args": {"file_id": record.file_id}})
        if self.fail_on_create:
            raise MetadataStoreError("Simulated metadata store outage")
        with self._lock:
            if record.file_id in self._storage:
                raise DuplicateFileIdError(f"File id already exists: {record.file_id}")
            self._storage[record.file_id] = record.with_owner(
                Owner(record.owner.user_id) if record.owner else None
            )
            if record.owner is not None and record.owner.username:
                self._usernames[record.owner.user_id] = record.owner.username
        return record

    def find_by_id(self, file_id: str) -> Optional[FileRecord]:
        self._call_history.append({"method": "find_by_id", "args": {"file_id": file_id}})
        with self._lock:
            return self._storage.get(file_id)

    def find_by_id_with_owner(self, file_id: str) -> Optional[FileRecord]:
        record = self.find_by_id(file_id)
        if record is None or record.owner is None:
            return record
        user_id = record.owner.user_id
        return record.with_owner(Owner(user_id, self._usernames.get(user_id)))

    def find_by_owner(self, owner: Owner) -> List[FileRecord]:
        self._call_history.append({"method": "find_by_owner", "args": {"owner": owner.user_id}})
        with self._lock:
            owned = [r for r in self._storage.values() if r.is_owned_by(owner)]
            resolved = Owner(owner.user_id, self._usernames.get(owner.user_id))
        owned = [r.with_owner(resolved) for r in owned]
        return sorted(owned, key=lambda r: r.uploaded_at, reverse=True)

    def find_by_id_and_owner(self, file_id: str, owner: Owner) -> Optional[FileRecord]:
        record = self.find_by_id(file_id)
        if record is None or not record.is_owned_by(owner):
            return None
        return record

    def exists_by_id(self, file_id: str) -> bool:
        with self._lock:
            return file_id in self._storage or file_id in self.taken_ids

    def update(self, record: FileRecord) -> FileRecord:
        with self._lock:
            self._storage[record.file_id] = record
        return record

    def increment_download_count(self, file_id: str, limit: int) -> Optional[int]:
        self._call_history.append(
            {"method": "increment_download_count", "args": {"file_id": file_id, "limit": limit}}
        )
        with self._lock:
            record = self._storage.get(file_id)
            if record is None:
                raise FileRecordNotFoundError(f"File not found: {file_id}")
            if record.download_count >= limit:
                return None
            updated = record.with_download_count(record.download_count + 1)
            self._storage[file_id] = updated
            return updated.download_count

    def delete(self, record: FileRecord) -> bool:
        self._call_history.append({"method": "delete", "args": {"file_id": record.file_id}})
        if record.file_id in self.fail_on_delete:
            raise MetadataStoreError(f"Simulated delete failure for {record.file_id}")
        with self._lock:
            return self._storage.pop(record.file_id, None) is not None

    def find_all_expired_before(self, timestamp: datetime) -> List[FileRecord]:
        with self._lock:
            return [r for r in self._storage.values() if r.expires_at < timestamp]

    # Inspection methods

    def get_call_history(self) -> List[Dict[str, Any]]:
        return self._call_history.copy()

    def calls_to(self, method: str) -> int:
        return sum(1 for call in self._call_history if call["method"] == method)

    def count(self) -> int:
        with self._lock:
            return len(self._storage)


class MockBlobStore(IBlobStore):
    """
    In-memory implementation of IBlobStore.

    Failure switches:
        fail_on_write: write() raises StorageWriteError
        fail_on_delete: delete() raises StorageError for these ids
    """

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}
        self._modified: Dict[str, datetime] = {}
        self._lock = threading.Lock()
        self.fail_on_write = False
        self.fail_on_delete: Set[str] = set()

    def write(self, file_id: str, extension: str, content: BinaryIO) -> int:
        if self.fail_on_write:
            raise StorageWriteError("Simulated unwritable medium")
        data = content.read()
        name = blob_name(file_id, extension)
        with self._lock:
            if name in self._blobs:
                raise StorageWriteError(f"Blob already exists: {name}")
            self._blobs[name] = data
            self._modified[name] = datetime.now(timezone.utc)
        return len(data)

    def open(self, file_id: str, extension: str) -> BinaryIO:
        name = blob_name(file_id, extension)
        with self._lock:
            if name not in self._blobs:
                raise BlobNotFoundError(f"Blob not found: {name}")
            return BytesIO(self._blobs[name])

    def delete(self, file_id: str, extension: str) -> bool:
        if file_id in self.fail_on_delete:
            raise StorageError(f"Simulated delete failure for {file_id}")
        return self.delete_by_name(blob_name(file_id, extension))

    def delete_by_name(self, name: str) -> bool:
        with self._lock:
            self._modified.pop(name, None)
            return self._blobs.pop(name, None) is not None

    def exists(self, file_id: str, extension: str) -> bool:
        with self._lock:
            return blob_name(file_id, extension) in self._blobs

    def get_size(self, file_id: str, extension: str) -> Optional[int]:
        with self._lock:
            data = self._blobs.get(blob_name(file_id, extension))
        return None if data is None else len(data)

    def list_blobs(self) -> Iterator[BlobInfo]:
        with self._lock:
            snapshot = [
                BlobInfo(name=name, size_bytes=len(data), modified_at=self._modified[name])
                for name, data in self._blobs.items()
            ]
        return iter(snapshot)

    # Inspection methods

    def put(self, name: str, data: bytes, modified_at: datetime) -> None:
        """Place a blob directly, bypassing write(), e.g. to plant an orphan."""
        with self._lock:
            self._blobs[name] = data
            self._modified[name] = modified_at

    def read(self, file_id: str, extension: str) -> Optional[bytes]:
        with self._lock:
            return self._blobs.get(blob_name(file_id, extension))

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._blobs)
