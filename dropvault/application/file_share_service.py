"""
File Share Service

Application service between the HTTP layer and the file lifecycle engine.
Turns FileRecords into client-safe dictionaries; the owner object itself
never leaves this layer, only its display name.
"""

import logging
from typing import Any, Dict, List, Optional

from dropvault.domain.file_lifecycle.entities import DownloadHandle, FileRecord
from dropvault.domain.file_lifecycle.services import FileLifecycleEngine
from dropvault.domain.file_lifecycle.upload_source import UploadSource
from dropvault.domain.identity import Owner

logger = logging.getLogger(__name__)


class FileShareService:
    """
    API-facing facade over FileLifecycleEngine.

    Domain errors pass through untouched; the API layer maps them to
    HTTP responses.
    """

    def __init__(self, engine: FileLifecycleEngine):
        self.engine = engine

    def to_response(self, record: FileRecord) -> Dict[str, Any]:
        """Client-safe projection of a record."""
        max_downloads = self.engine.max_downloads_for(record)
        return {
            "id": record.file_id,
            "filename": record.original_name,
            "size_bytes": record.size_bytes,
            "mime_type": record.mime_hint,
            "uploaded_at": record.uploaded_at.isoformat(),
            "expires_at": record.expires_at.isoformat(),
            "download_count": record.download_count,
            "max_downloads": max_downloads,
            "remaining_downloads": max(max_downloads - record.download_count, 0),
            "is_public": record.is_public,
            "owner_username": record.owner.display_name if record.owner else None,
        }

    def upload_public(self, source: UploadSource) -> Dict[str, str]:
        record = self.engine.upload_public(source)
        return {"id": record.file_id}

    def upload_for_user(self, source: UploadSource, owner: Owner) -> Dict[str, str]:
        record = self.engine.upload_for_user(source, owner)
        return {"id": record.file_id, "message": "File uploaded successfully"}

    def get_file_info(self, file_id: str) -> Dict[str, Any]:
        return self.to_response(self.engine.get_metadata(file_id))

    def list_user_files(self, owner: Owner) -> List[Dict[str, Any]]:
        return [self.to_response(record) for record in self.engine.list_owned(owner)]

    def download(self, file_id: str, caller: Optional[Owner] = None) -> DownloadHandle:
        """Count a download; the caller must close the returned handle."""
        return self.engine.download(file_id, caller)

    def delete_user_file(self, file_id: str, owner: Owner) -> Dict[str, str]:
        self.engine.delete_owned(file_id, owner)
        return {"message": "File deleted successfully"}

    def upload_limits(self) -> Dict[str, Any]:
        """Current per-tier policy, for clients that pre-check uploads."""
        return self.engine.policy_table.to_dict()
