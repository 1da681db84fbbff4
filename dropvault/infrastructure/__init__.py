"""Infrastructure layer for Redis and filesystem storage."""

from .local_blob_store import LocalBlobStore
from .redis_file_record_repository import RedisFileRecordRepository
from .redis_repository import RedisConnectionManager, RedisRepository
from .storage_factory import StorageFactory

__all__ = [
    "RedisRepository",
    "RedisConnectionManager",
    "RedisFileRecordRepository",
    "LocalBlobStore",
    "StorageFactory",
]
