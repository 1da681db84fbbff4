"""
File Lifecycle Engine

Domain service that owns upload, metadata reads, downloads and
owner-initiated deletes. Coordinates the identifier allocator, the policy
table, the blob store and the metadata store.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..errors import (
    AccessDeniedError,
    DownloadLimitExceededError,
    FileExpiredError,
    FileRecordNotFoundError,
    PayloadTooLargeError,
    StorageError,
)
from ..events import FileDeletedEvent, FileDownloadedEvent, FileUploadedEvent
from ..identity import Owner
from .blob_store import IBlobStore
from .entities import DownloadHandle, FileRecord, utcnow
from .identifier_allocator import IdentifierAllocator
from .repositories import IFileRecordRepository
from .upload_source import UploadSource
from .value_objects import PolicyTable, Tier, extension_of, normalize_filename

logger = logging.getLogger(__name__)


class FileLifecycleEngine:
    """
    Domain service for the file lifecycle.

    Validation failures (size, limits, access) are raised before any store
    is mutated. Storage failures are never retried here; they propagate as
    StorageError subclasses and the caller decides what to do.
    """

    def __init__(
        self,
        metadata_repository: IFileRecordRepository,
        blob_store: IBlobStore,
        policy_table: PolicyTable,
        allocator: Optional[IdentifierAllocator] = None,
        event_publisher=None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the engine with its collaborators.

        Args:
            metadata_repository: Durable FileRecord store
            blob_store: Byte storage
            policy_table: Per-tier limits, fixed for the process lifetime
            allocator: Identifier allocator (built on metadata_repository if None)
            event_publisher: Optional object with publish(event)
            clock: Returns the current UTC time (for tests)
        """
        self.metadata_repo = metadata_repository
        self.blob_store = blob_store
        self.policy_table = policy_table
        self.allocator = allocator or IdentifierAllocator(metadata_repository)
        self.event_publisher = event_publisher
        self.clock = clock or utcnow

    # Uploads

    def upload_public(self, source: UploadSource) -> FileRecord:
        """Anonymous upload: PUBLIC visibility, no owner."""
        return self._upload(source, Tier.PUBLIC, owner=None)

    def upload_for_user(self, source: UploadSource, owner: Owner) -> FileRecord:
        """Authenticated upload: PRIVATE visibility, owned by owner."""
        if owner is None:
            raise AccessDeniedError("User uploads require an owner")
        return self._upload(source, Tier.USER, owner=owner)

    def _upload(
        self, source: UploadSource, tier: Tier, owner: Optional[Owner]
    ) -> FileRecord:
        """
        Store an upload under the given tier.

        Order: size check, id allocation, blob write, metadata insert.
        A failed blob write leaves no metadata behind. A failed metadata
        insert triggers one best-effort blob delete before re-raising.
        """
        policy = self.policy_table.for_tier(tier)

        declared_size = source.size()
        if declared_size > policy.max_size_bytes:
            raise PayloadTooLargeError(declared_size, policy.max_size_bytes)

        file_id = self.allocator.allocate()
        original_name = normalize_filename(source.original_filename())
        extension = extension_of(original_name)

        stream = source.open_stream()
        try:
            written = self.blob_store.write(file_id, extension, stream)
        finally:
            stream.close()

        # The declared size is client-supplied; the stored size is authoritative.
        if written > policy.max_size_bytes:
            self._discard_blob(file_id, extension)
            raise PayloadTooLargeError(written, policy.max_size_bytes)

        record = FileRecord.create(
            file_id=file_id,
            original_name=original_name,
            size_bytes=written,
            policy=policy,
            visibility=tier.visibility,
            owner=owner,
            mime_hint=source.content_type(),
            now=self.clock(),
        )

        try:
            record = self.metadata_repo.create(record)
        except StorageError:
            logger.error(
                f"Metadata insert failed for {file_id}; removing its blob",
                exc_info=True,
            )
            self._discard_blob(file_id, extension)
            raise

        logger.info(
            f"Stored {tier.value} upload {file_id} ({written} bytes, "
            f"expires {record.expires_at.isoformat()})"
        )
        self._publish(
            FileUploadedEvent(
                aggregate_id=file_id,
                occurred_at=record.uploaded_at,
                visibility=record.visibility.value,
                size_bytes=written,
                expires_at=record.expires_at,
                owner_id=owner.user_id if owner else None,
            )
        )
        return record

    # Reads

    def get_metadata(self, file_id: str) -> FileRecord:
        """
        Retrieve a live record with its owner resolved.

        Raises:
            FileRecordNotFoundError: If no record exists
            FileExpiredError: If the record's expiry time has passed
        """
        record = self.metadata_repo.find_by_id_with_owner(file_id)
        if record is None:
            raise FileRecordNotFoundError(f"File not found: {file_id}")

        if record.is_expired(self.clock()):
            raise FileExpiredError(f"File has expired: {file_id}")

        return record

    def list_owned(self, owner: Owner, include_expired: bool = False) -> List[FileRecord]:
        """Files owned by owner, most recent upload first."""
        records = self.metadata_repo.find_by_owner(owner)
        if include_expired:
            return records
        now = self.clock()
        return [record for record in records if not record.is_expired(now)]

    def max_downloads_for(self, record: FileRecord) -> int:
        """Download limit from the current policy for the record's tier."""
        return self.policy_table.for_visibility(record.visibility).max_downloads

    # Downloads

    def download(self, file_id: str, caller: Optional[Owner] = None) -> DownloadHandle:
        """
        Open the blob and count a download.

        Args:
            file_id: File identifier
            caller: Identity of the requester, None for anonymous

        Returns:
            DownloadHandle with the post-increment record and an open stream

        Raises:
            FileRecordNotFoundError / FileExpiredError: As get_metadata
            AccessDeniedError: Private file and caller is not the owner
            DownloadLimitExceededError: Limit already reached
            BlobNotFoundError: Blob vanished (e.g. reaped concurrently)
        """
        record = self.get_metadata(file_id)

        if not record.can_be_downloaded_by(caller):
            raise AccessDeniedError(f"Not authorized to download file {file_id}")

        limit = self.max_downloads_for(record)
        # Only a download whose blob could be opened is counted
        stream = self.blob_store.open(file_id, record.extension)
        try:
            new_count = self.metadata_repo.increment_download_count(file_id, limit)
            if new_count is None:
                raise DownloadLimitExceededError(file_id, limit)
        except Exception:
            stream.close()
            raise

        counted = record.with_download_count(new_count)

        logger.info(f"Download {new_count}/{limit} accepted for {file_id}")
        self._publish(
            FileDownloadedEvent(
                aggregate_id=file_id,
                occurred_at=self.clock(),
                download_count=new_count,
                max_downloads=limit,
            )
        )
        return DownloadHandle(record=counted, stream=stream)

    # Deletes

    def delete_owned(self, file_id: str, owner: Owner) -> None:
        """
        Delete one of owner's files: blob first, then metadata.

        A file owned by someone else raises the same FileRecordNotFoundError
        as an unknown id, so existence is never leaked.
        """
        record = self.metadata_repo.find_by_id_and_owner(file_id, owner)
        if record is None:
            raise FileRecordNotFoundError(f"File not found: {file_id}")

        blob_existed = self.blob_store.delete(file_id, record.extension)
        if not blob_existed:
            logger.warning(f"Blob for {file_id} was already missing during delete")

        self.metadata_repo.delete(record)

        logger.info(f"Owner {owner.user_id} deleted file {file_id}")
        self._publish(
            FileDeletedEvent(
                aggregate_id=file_id,
                occurred_at=self.clock(),
                owner_id=owner.user_id,
                blob_existed=blob_existed,
            )
        )

    # Helpers

    def _discard_blob(self, file_id: str, extension: str) -> None:
        try:
            self.blob_store.delete(file_id, extension)
        except StorageError as e:
            # Left for the reaper's orphan sweep.
            logger.error(f"Could not remove blob for {file_id}: {e}")

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)
