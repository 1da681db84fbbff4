"""
Redis Repository Base Class

Provides JSON document storage, sorted-set indexes and Lua script
execution for Redis-backed repositories.
Implements the repository pattern for Redis-based data storage.
"""

import json
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import redis
from redis.exceptions import ConnectionError as RedisConnectionError


class RedisRepository:
    """
    Base Redis repository with atomic operations.

    Redis errors propagate to the caller; concrete repositories translate
    them into domain storage errors.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix
        self._scripts: Dict[str, Any] = {}

    def make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    @staticmethod
    def _decode(data: Any) -> str:
        return data.decode("utf-8") if isinstance(data, bytes) else data

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Returns:
            Dictionary if found, None otherwise

        Raises:
            json.JSONDecodeError: If the stored value is not valid JSON
        """
        data = self.redis.get(self.make_key(key))
        if data is None:
            return None
        return json.loads(self._decode(data))

    def mget_json(self, keys: Sequence[str]) -> List[Optional[Dict[str, Any]]]:
        """Get several JSON documents in one round trip, None for missing keys."""
        if not keys:
            return []
        values = self.redis.mget([self.make_key(key) for key in keys])
        return [None if value is None else json.loads(self._decode(value)) for value in values]

    def exists(self, key: str) -> bool:
        return self.redis.exists(self.make_key(key)) > 0

    def set_hash_field(self, key: str, field: str, value: str) -> None:
        self.redis.hset(self.make_key(key), field, value)

    def get_hash_field(self, key: str, field: str) -> Optional[str]:
        value = self.redis.hget(self.make_key(key), field)
        return None if value is None else self._decode(value)

    def zrange_by_score(self, key: str, min_score: Any, max_score: Any) -> List[str]:
        """Members with min_score <= score <= max_score, lowest score first."""
        members = self.redis.zrangebyscore(self.make_key(key), min_score, max_score)
        return [self._decode(member) for member in members]

    def zrevrange_all(self, key: str) -> List[str]:
        """All members, highest score first."""
        members = self.redis.zrevrange(self.make_key(key), 0, -1)
        return [self._decode(member) for member in members]

    def zrem(self, key: str, *members: str) -> int:
        if not members:
            return 0
        return self.redis.zrem(self.make_key(key), *members)

    def run_script(self, name: str, source: str, keys: Sequence[str], args: Sequence[Any]) -> Any:
        """
        Run a Lua script atomically.

        Scripts are registered once per repository and invoked via EVALSHA.
        Keys are prefixed here; arguments are passed through unchanged.
        """
        script = self._scripts.get(name)
        if script is None:
            script = self.redis.register_script(source)
            self._scripts[name] = script
        return script(keys=[self.make_key(key) for key in keys], args=list(args))

    @contextmanager
    def transaction(self) -> Iterator["redis.client.Pipeline"]:
        """
        MULTI/EXEC pipeline. Queued commands run atomically when the caller
        calls execute(); the pipeline is reset on exit either way.
        """
        pipe = self.redis.pipeline(transaction=True)
        try:
            yield pipe
        finally:
            pipe.reset()


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: Optional[str] = None,
        max_connections: int = 20,
        decode_responses: bool = False,
    ):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            retry_on_timeout=True,
            socket_keepalive=True,
            socket_keepalive_options={},
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return self.client.ping()
        except RedisConnectionError:
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()
