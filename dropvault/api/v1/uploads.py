"""
Multipart Upload Adapter

Wraps a Werkzeug FileStorage as an UploadSource so the engine never
depends on Flask types.
"""

import io
from typing import BinaryIO, Optional

from werkzeug.datastructures import FileStorage

from dropvault.domain.file_lifecycle.upload_source import UploadSource


class FileStorageUpload(UploadSource):
    """UploadSource over a parsed multipart file part."""

    def __init__(self, file_storage: FileStorage):
        self.file_storage = file_storage

    def size(self) -> int:
        stream = self.file_storage.stream
        position = stream.tell()
        stream.seek(0, io.SEEK_END)
        size = stream.tell()
        stream.seek(position)
        return size

    def original_filename(self) -> Optional[str]:
        # Kept verbatim for display; only its extension reaches storage
        return self.file_storage.filename

    def open_stream(self) -> BinaryIO:
        stream = self.file_storage.stream
        stream.seek(0)
        return stream

    def content_type(self) -> Optional[str]:
        return self.file_storage.mimetype or None
