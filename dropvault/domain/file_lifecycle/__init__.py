"""
File Lifecycle Domain

Entities, value objects, storage interfaces and services for uploaded
files: allocation, upload, download accounting, deletion and expiry.
"""

from .blob_store import BlobInfo, IBlobStore
from .entities import DownloadHandle, FileRecord, utcnow
from .identifier_allocator import IdentifierAllocator
from .reaper import ExpiryReaper, ReaperState, ReapReport
from .repositories import IFileRecordRepository
from .services import FileLifecycleEngine
from .upload_source import BytesUpload, UploadSource
from .value_objects import PolicyTable, Tier, TierPolicy, Visibility

__all__ = [
    "BlobInfo",
    "BytesUpload",
    "DownloadHandle",
    "ExpiryReaper",
    "FileLifecycleEngine",
    "FileRecord",
    "IBlobStore",
    "IFileRecordRepository",
    "IdentifierAllocator",
    "PolicyTable",
    "ReapReport",
    "ReaperState",
    "Tier",
    "TierPolicy",
    "UploadSource",
    "Visibility",
    "utcnow",
]
