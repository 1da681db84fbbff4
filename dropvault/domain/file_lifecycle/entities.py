"""
File Lifecycle Entities

Domain entities for uploaded file metadata and download handles.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, BinaryIO, Dict, Optional

from ..errors import ValidationError
from ..identity import Owner
from .value_objects import (
    TierPolicy,
    Visibility,
    blob_name,
    extension_of,
    normalize_filename,
)


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class FileRecord:
    """
    Entity describing one uploaded file.

    The metadata store holds exactly one FileRecord per live file and is
    the single source of truth for existence, visibility and limits.
    Only download_count changes after creation.
    """
    file_id: str
    original_name: str
    size_bytes: int
    uploaded_at: datetime
    expires_at: datetime
    visibility: Visibility
    owner: Optional[Owner] = None
    download_count: int = 0
    mime_hint: Optional[str] = None

    def __post_init__(self):
        self.uploaded_at = _as_utc(self.uploaded_at)
        self.expires_at = _as_utc(self.expires_at)
        self.original_name = normalize_filename(self.original_name)

        if not self.file_id:
            raise ValidationError("file_id cannot be empty")
        if self.size_bytes < 0:
            raise ValidationError(f"size_bytes cannot be negative, got {self.size_bytes}")
        if self.download_count < 0:
            raise ValidationError(
                f"download_count cannot be negative, got {self.download_count}"
            )
        if self.expires_at <= self.uploaded_at:
            raise ValidationError("expires_at must be later than uploaded_at")
        if self.visibility is Visibility.PUBLIC and self.owner is not None:
            raise ValidationError("Public files cannot have an owner")
        if self.visibility is Visibility.PRIVATE and self.owner is None:
            raise ValidationError("Private files must have an owner")

    @classmethod
    def create(
        cls,
        file_id: str,
        original_name: Optional[str],
        size_bytes: int,
        policy: TierPolicy,
        visibility: Visibility,
        owner: Optional[Owner] = None,
        mime_hint: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "FileRecord":
        """
        Factory method for a freshly uploaded file.

        Args:
            file_id: Allocated identifier
            original_name: Uploader-supplied filename, may be blank
            size_bytes: Exact stored byte count
            policy: Tier policy that sets the expiry
            visibility: PUBLIC or PRIVATE
            owner: Required for PRIVATE, forbidden for PUBLIC
            mime_hint: Optional content type
            now: Upload time (defaults to current UTC time)

        Returns:
            New FileRecord with download_count 0
        """
        uploaded_at = _as_utc(now) if now else utcnow()
        return cls(
            file_id=file_id,
            original_name=normalize_filename(original_name),
            size_bytes=size_bytes,
            uploaded_at=uploaded_at,
            expires_at=uploaded_at + timedelta(days=policy.expiry_days),
            visibility=visibility,
            owner=owner,
            download_count=0,
            mime_hint=mime_hint,
        )

    @property
    def is_public(self) -> bool:
        return self.visibility is Visibility.PUBLIC

    @property
    def extension(self) -> str:
        return extension_of(self.original_name)

    @property
    def blob_name(self) -> str:
        return blob_name(self.file_id, self.extension)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True once expires_at has been reached."""
        current = _as_utc(now) if now else utcnow()
        return self.expires_at <= current

    def is_owned_by(self, owner: Optional[Owner]) -> bool:
        return owner is not None and self.owner is not None and self.owner == owner

    def can_be_downloaded_by(self, caller: Optional[Owner]) -> bool:
        """Public files are open to anyone; private ones to their owner only."""
        return self.is_public or self.is_owned_by(caller)

    def with_download_count(self, download_count: int) -> "FileRecord":
        return replace(self, download_count=download_count)

    def with_owner(self, owner: Optional[Owner]) -> "FileRecord":
        return replace(self, owner=owner)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for persistence. The owner is stored by user_id only."""
        return {
            "file_id": self.file_id,
            "original_name": self.original_name,
            "size_bytes": self.size_bytes,
            "mime_hint": self.mime_hint,
            "uploaded_at": self.uploaded_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "download_count": self.download_count,
            "owner_id": self.owner.user_id if self.owner else None,
            "visibility": self.visibility.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        owner_id = data.get("owner_id")
        return cls(
            file_id=data["file_id"],
            original_name=data.get("original_name"),
            size_bytes=int(data["size_bytes"]),
            mime_hint=data.get("mime_hint"),
            uploaded_at=datetime.fromisoformat(data["uploaded_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            download_count=int(data.get("download_count", 0)),
            owner=Owner(owner_id) if owner_id else None,
            visibility=Visibility(data["visibility"]),
        )


@dataclass
class DownloadHandle:
    """
    Result of an accepted download.

    Holds the post-increment record and an open stream over the blob.
    The caller owns the stream and must close it.
    """
    record: FileRecord
    stream: BinaryIO = field(repr=False)

    @property
    def filename(self) -> str:
        return self.record.original_name

    @property
    def mimetype(self) -> str:
        return self.record.mime_hint or "application/octet-stream"

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "DownloadHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
