"""
Redis File Record Repository Implementation

Concrete Redis-based implementation of IFileRecordRepository.

Key layout:
- file_record:{file_id}     JSON document for one FileRecord
- file_expiry               sorted set of file ids scored by expires_at
- file_owner:{user_id}      sorted set of file ids scored by uploaded_at
- owner_profile:{user_id}   hash holding the owner's display name

Records carry no Redis TTL: expiry is enforced by the engine on read and
by the reaper on purge, so an expired record is still visible to the
reaper until it is removed.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from redis.exceptions import RedisError

from dropvault.domain.errors import (
    DuplicateFileIdError,
    FileRecordNotFoundError,
    MetadataStoreError,
    ValidationError,
)
from dropvault.domain.file_lifecycle.entities import FileRecord
from dropvault.domain.file_lifecycle.repositories import IFileRecordRepository
from dropvault.domain.identity import Owner

logger = logging.getLogger(__name__)

# Insert the record only if its id is free, then index it.
# KEYS: record, expiry index[, owner index]
# ARGV: record json, file id, expires_at score, uploaded_at score
_CREATE_SCRIPT = """
if not redis.call('SET', KEYS[1], ARGV[1], 'NX') then
    return 0
end
redis.call('ZADD', KEYS[2], ARGV[3], ARGV[2])
if #KEYS == 3 then
    redis.call('ZADD', KEYS[3], ARGV[4], ARGV[2])
end
return 1
"""

# Check-and-increment with a ceiling.
# Returns the new count, -1 when the limit is reached, -2 when missing.
_INCREMENT_SCRIPT = """
local data = redis.call('GET', KEYS[1])
if not data then
    return -2
end
local record = cjson.decode(data)
local count = tonumber(record['download_count']) or 0
local limit = tonumber(ARGV[1])
if count >= limit then
    return -1
end
count = count + 1
record['download_count'] = count
redis.call('SET', KEYS[1], cjson.encode(record))
return count
"""

_LIMIT_REACHED = -1
_MISSING = -2


class RedisFileRecordRepository(IFileRecordRepository):
    """
    Redis-based implementation of IFileRecordRepository.

    Every Redis failure surfaces as MetadataStoreError.
    """

    def __init__(self, redis_repository):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
        """
        self.redis_repo = redis_repository
        self.record_prefix = "file_record"
        self.expiry_index = "file_expiry"
        self.owner_prefix = "file_owner"
        self.profile_prefix = "owner_profile"

    def _record_key(self, file_id: str) -> str:
        return f"{self.record_prefix}:{file_id}"

    def _owner_key(self, user_id: str) -> str:
        return f"{self.owner_prefix}:{user_id}"

    def _profile_key(self, user_id: str) -> str:
        return f"{self.profile_prefix}:{user_id}"

    @contextmanager
    def _store_errors(self, operation: str):
        try:
            yield
        except RedisError as e:
            logger.error(f"Redis error during {operation}: {e}")
            raise MetadataStoreError(f"Metadata store unavailable during {operation}", e) from e
        except json.JSONDecodeError as e:
            raise MetadataStoreError(f"Corrupt file record read during {operation}", e) from e

    def _deserialize(self, data: dict) -> FileRecord:
        try:
            return FileRecord.from_dict(data)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise MetadataStoreError(
                f"Corrupt file record {data.get('file_id', '?')}", e
            ) from e

    def create(self, record: FileRecord) -> FileRecord:
        keys = [self._record_key(record.file_id), self.expiry_index]
        if record.owner is not None:
            keys.append(self._owner_key(record.owner.user_id))
        args = [
            json.dumps(record.to_dict()),
            record.file_id,
            record.expires_at.timestamp(),
            record.uploaded_at.timestamp(),
        ]

        with self._store_errors("create"):
            created = self.redis_repo.run_script("create", _CREATE_SCRIPT, keys, args)
            if not created:
                raise DuplicateFileIdError(f"File id already exists: {record.file_id}")
            if record.owner is not None and record.owner.username:
                self.redis_repo.set_hash_field(
                    self._profile_key(record.owner.user_id), "username", record.owner.username
                )
        return record

    def find_by_id(self, file_id: str) -> Optional[FileRecord]:
        with self._store_errors("find_by_id"):
            data = self.redis_repo.get_json(self._record_key(file_id))
        if data is None:
            return None
        return self._deserialize(data)

    def find_by_id_with_owner(self, file_id: str) -> Optional[FileRecord]:
        record = self.find_by_id(file_id)
        if record is None or record.owner is None:
            return record
        return record.with_owner(self._resolve_owner(record.owner.user_id))

    def _resolve_owner(self, user_id: str) -> Owner:
        with self._store_errors("owner lookup"):
            username = self.redis_repo.get_hash_field(self._profile_key(user_id), "username")
        return Owner(user_id, username)

    def find_by_owner(self, owner: Owner) -> List[FileRecord]:
        owner_key = self._owner_key(owner.user_id)
        with self._store_errors("find_by_owner"):
            file_ids = self.redis_repo.zrevrange_all(owner_key)
            documents = self.redis_repo.mget_json(
                [self._record_key(file_id) for file_id in file_ids]
            )

        records = []
        stale = []
        for file_id, data in zip(file_ids, documents):
            if data is None:
                stale.append(file_id)
                continue
            records.append(self._deserialize(data))

        if stale:
            # Index entries left behind by a record deleted mid-read
            with self._store_errors("find_by_owner"):
                self.redis_repo.zrem(owner_key, *stale)

        if not records:
            return records
        # Every listed record shares this owner
        resolved = self._resolve_owner(owner.user_id)
        return [record.with_owner(resolved) for record in records]

    def find_by_id_and_owner(self, file_id: str, owner: Owner) -> Optional[FileRecord]:
        record = self.find_by_id(file_id)
        if record is None or not record.is_owned_by(owner):
            return None
        return record

    def exists_by_id(self, file_id: str) -> bool:
        with self._store_errors("exists_by_id"):
            return self.redis_repo.exists(self._record_key(file_id))

    def update(self, record: FileRecord) -> FileRecord:
        with self._store_errors("update"):
            with self.redis_repo.transaction() as pipe:
                pipe.set(
                    self.redis_repo.make_key(self._record_key(record.file_id)),
                    json.dumps(record.to_dict()),
                )
                pipe.zadd(
                    self.redis_repo.make_key(self.expiry_index),
                    {record.file_id: record.expires_at.timestamp()},
                )
                if record.owner is not None:
                    pipe.zadd(
                        self.redis_repo.make_key(self._owner_key(record.owner.user_id)),
                        {record.file_id: record.uploaded_at.timestamp()},
                    )
                pipe.execute()
        return record

    def increment_download_count(self, file_id: str, limit: int) -> Optional[int]:
        with self._store_errors("increment_download_count"):
            result = int(
                self.redis_repo.run_script(
                    "increment", _INCREMENT_SCRIPT, [self._record_key(file_id)], [limit]
                )
            )
        if result == _MISSING:
            raise FileRecordNotFoundError(f"File not found: {file_id}")
        if result == _LIMIT_REACHED:
            return None
        return result

    def delete(self, record: FileRecord) -> bool:
        with self._store_errors("delete"):
            with self.redis_repo.transaction() as pipe:
                pipe.delete(self.redis_repo.make_key(self._record_key(record.file_id)))
                pipe.zrem(self.redis_repo.make_key(self.expiry_index), record.file_id)
                if record.owner is not None:
                    pipe.zrem(
                        self.redis_repo.make_key(self._owner_key(record.owner.user_id)),
                        record.file_id,
                    )
                results = pipe.execute()
        return bool(results[0])

    def find_all_expired_before(self, timestamp: datetime) -> List[FileRecord]:
        with self._store_errors("find_all_expired_before"):
            # "(" makes the upper bound exclusive
            file_ids = self.redis_repo.zrange_by_score(
                self.expiry_index, "-inf", f"({timestamp.timestamp()}"
            )
            documents = self.redis_repo.mget_json(
                [self._record_key(file_id) for file_id in file_ids]
            )

        records = []
        stale = []
        for file_id, data in zip(file_ids, documents):
            if data is None:
                stale.append(file_id)
                continue
            records.append(self._deserialize(data))

        if stale:
            with self._store_errors("find_all_expired_before"):
                self.redis_repo.zrem(self.expiry_index, *stale)
        return records
