"""
Storage Factory

Factory for creating the blob store implementation.

The application layer stays decoupled from the concrete implementation via
the IBlobStore interface.
"""

import logging
import os

from dropvault.domain.errors import StorageError
from dropvault.domain.file_lifecycle.blob_store import IBlobStore

from .local_blob_store import LocalBlobStore

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_DIR = "/tmp/dropvault"


class StorageFactory:
    """Factory that returns a local filesystem blob store."""

    @staticmethod
    def create_storage(storage_dir: str = None) -> IBlobStore:
        """
        Create local filesystem blob store.

        Args:
            storage_dir: Overrides the STORAGE_DIR environment variable

        Returns:
            Local IBlobStore implementation

        Environment Variables:
            STORAGE_DIR: Blob directory (default: /tmp/dropvault)

        Raises:
            RuntimeError: If local storage initialization fails
        """
        storage_dir = storage_dir or os.getenv("STORAGE_DIR", DEFAULT_STORAGE_DIR)
        try:
            storage = LocalBlobStore(storage_dir)
        except StorageError as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e
        logger.info(f"Storage factory: Using local filesystem storage at {storage_dir}")
        return storage
