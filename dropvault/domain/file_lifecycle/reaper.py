"""
Expiry Reaper

Periodic purge of expired files: the blob first, then the metadata record.
Metadata deletion is authoritative; blob deletion is best-effort cleanup.
"""

import logging
import threading
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from ..errors import StorageError
from ..events import FileReapedEvent, ReapCompletedEvent
from .blob_store import IBlobStore
from .entities import FileRecord, utcnow
from .repositories import IFileRecordRepository

logger = logging.getLogger(__name__)

DEFAULT_ORPHAN_GRACE = timedelta(hours=1)


class ReaperState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    DELETING = "deleting"


@dataclass
class ReapReport:
    """Counters for one reaper run."""
    scanned: int = 0
    records_deleted: int = 0
    blobs_deleted: int = 0
    blobs_missing: int = 0
    blob_failures: int = 0
    record_failures: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class ExpiryReaper:
    """
    Purges expired files from both stores.

    State machine: IDLE -> SCANNING -> DELETING (per record) -> IDLE.
    Each record is handled independently; one failure never stops the run.
    Running twice on the same state is a no-op the second time.

    Single-process only: two reapers against the same store would race
    harmlessly (both deletes are idempotent) but nothing coordinates them.
    """

    def __init__(
        self,
        metadata_repository: IFileRecordRepository,
        blob_store: IBlobStore,
        event_publisher=None,
        clock: Optional[Callable[[], datetime]] = None,
        orphan_grace: timedelta = DEFAULT_ORPHAN_GRACE,
    ):
        """
        Args:
            metadata_repository: Store queried for expired records
            blob_store: Store holding the bytes
            event_publisher: Optional object with publish(event)
            clock: Returns the current UTC time (for tests)
            orphan_grace: Minimum age before an unreferenced blob is swept
        """
        self.metadata_repo = metadata_repository
        self.blob_store = blob_store
        self.event_publisher = event_publisher
        self.clock = clock or utcnow
        self.orphan_grace = orphan_grace
        self._state = ReaperState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> ReaperState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: ReaperState) -> None:
        with self._state_lock:
            self._state = state

    def run(self, now: Optional[datetime] = None) -> ReapReport:
        """
        Purge every record whose expires_at is before now.

        Returns:
            ReapReport with per-run counters
        """
        now = now or self.clock()
        report = ReapReport()
        run_id = uuid.uuid4().hex[:12]

        logger.info(f"Reaper run {run_id} started (cutoff {now.isoformat()})")
        self._set_state(ReaperState.SCANNING)
        try:
            expired = self.metadata_repo.find_all_expired_before(now)
            report.scanned = len(expired)

            for record in expired:
                self._set_state(ReaperState.DELETING)
                self._reap_record(record, report)
        finally:
            self._set_state(ReaperState.IDLE)

        logger.info(
            f"Reaper run {run_id} finished: scanned={report.scanned} "
            f"deleted={report.records_deleted} blob_failures={report.blob_failures} "
            f"record_failures={report.record_failures}"
        )
        self._publish(
            ReapCompletedEvent(
                aggregate_id=run_id,
                occurred_at=self.clock(),
                scanned=report.scanned,
                records_deleted=report.records_deleted,
                blob_failures=report.blob_failures,
                record_failures=report.record_failures,
            )
        )
        return report

    def _reap_record(self, record: FileRecord, report: ReapReport) -> None:
        blob_deleted = False
        try:
            blob_deleted = self.blob_store.delete(record.file_id, record.extension)
            if blob_deleted:
                report.blobs_deleted += 1
            else:
                report.blobs_missing += 1
        except StorageError as e:
            report.blob_failures += 1
            logger.warning(f"Could not delete blob for expired file {record.file_id}: {e}")

        try:
            self.metadata_repo.delete(record)
        except StorageError:
            report.record_failures += 1
            logger.error(
                f"Could not delete metadata for expired file {record.file_id}",
                exc_info=True,
            )
            return

        report.records_deleted += 1
        self._publish(
            FileReapedEvent(
                aggregate_id=record.file_id,
                occurred_at=self.clock(),
                expired_at=record.expires_at,
                blob_deleted=blob_deleted,
            )
        )

    def sweep_orphans(self, now: Optional[datetime] = None) -> int:
        """
        Delete blobs with no metadata record that are older than orphan_grace.

        The grace period keeps uploads that are between their blob write
        and their metadata insert out of reach.

        Returns:
            Number of orphaned blobs removed
        """
        now = now or self.clock()
        cutoff = now - self.orphan_grace
        removed = 0

        for blob in self.blob_store.list_blobs():
            if blob.modified_at > cutoff:
                continue
            try:
                if self.metadata_repo.exists_by_id(blob.file_id):
                    continue
                if self.blob_store.delete_by_name(blob.name):
                    removed += 1
                    logger.info(f"Removed orphaned blob: {blob.name}")
            except StorageError as e:
                logger.warning(f"Failed to sweep orphaned blob {blob.name}: {e}")

        return removed

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)
