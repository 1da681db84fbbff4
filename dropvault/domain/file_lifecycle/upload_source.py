"""
Upload Source Interface

Capability interface for an incoming upload. Transport adapters (e.g. the
Werkzeug multipart adapter in the API layer) implement it so the engine
never depends on a web framework's file object.
"""

from abc import ABC, abstractmethod
from io import BytesIO
from typing import BinaryIO, Optional


class UploadSource(ABC):
    """An uploaded byte stream plus what the client told us about it."""

    @abstractmethod
    def size(self) -> int:
        """Declared size in bytes."""
        pass  # pragma: no cover

    @abstractmethod
    def original_filename(self) -> Optional[str]:
        """Filename supplied by the uploader, if any."""
        pass  # pragma: no cover

    @abstractmethod
    def open_stream(self) -> BinaryIO:
        """Binary stream positioned at the start of the content."""
        pass  # pragma: no cover

    def content_type(self) -> Optional[str]:
        """Content-type hint supplied by the uploader, if any."""
        return None


class BytesUpload(UploadSource):
    """In-memory upload, used by scripts and tests."""

    def __init__(
        self,
        data: bytes,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        declared_size: Optional[int] = None,
    ):
        self._data = data
        self._filename = filename
        self._content_type = content_type
        self._declared_size = len(data) if declared_size is None else declared_size

    def size(self) -> int:
        return self._declared_size

    def original_filename(self) -> Optional[str]:
        return self._filename

    def open_stream(self) -> BinaryIO:
        return BytesIO(self._data)

    def content_type(self) -> Optional[str]:
        return self._content_type
