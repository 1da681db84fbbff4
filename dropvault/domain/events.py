"""
Domain Events

Immutable records of significant state changes in the file lifecycle.
Events decouple side effects (logging, monitoring) from core business logic.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (the file id)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class FileUploadedEvent(DomainEvent):
    """
    Event emitted when an upload has been stored and recorded.

    Attributes:
        visibility: 'public' or 'private'
        size_bytes: Stored byte count
        expires_at: When the file expires
        owner_id: Owner user id for private uploads
    """
    visibility: str
    size_bytes: int
    expires_at: datetime
    owner_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "visibility": self.visibility,
            "size_bytes": self.size_bytes,
            "expires_at": self.expires_at.isoformat(),
            "owner_id": self.owner_id,
        })
        return base_dict


@dataclass(frozen=True)
class FileDownloadedEvent(DomainEvent):
    """
    Event emitted when a download has been accepted and counted.

    Attributes:
        download_count: Count after this download
        max_downloads: Limit in force when the download was accepted
    """
    download_count: int
    max_downloads: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "download_count": self.download_count,
            "max_downloads": self.max_downloads,
        })
        return base_dict


@dataclass(frozen=True)
class FileDeletedEvent(DomainEvent):
    """Event emitted when an owner deletes one of their files."""
    owner_id: str
    blob_existed: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "owner_id": self.owner_id,
            "blob_existed": self.blob_existed,
        })
        return base_dict


@dataclass(frozen=True)
class FileReapedEvent(DomainEvent):
    """
    Event emitted when the reaper purges an expired file.

    Attributes:
        expired_at: The record's expiry time
        blob_deleted: False if the blob was already gone or could not be removed
    """
    expired_at: datetime
    blob_deleted: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "expired_at": self.expired_at.isoformat(),
            "blob_deleted": self.blob_deleted,
        })
        return base_dict


@dataclass(frozen=True)
class ReapCompletedEvent(DomainEvent):
    """
    Event emitted at the end of each reaper run.

    aggregate_id is the run identifier rather than a file id.
    """
    scanned: int
    records_deleted: int
    blob_failures: int
    record_failures: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "scanned": self.scanned,
            "records_deleted": self.records_deleted,
            "blob_failures": self.blob_failures,
            "record_failures": self.record_failures,
        })
        return base_dict
