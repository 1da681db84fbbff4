"""
Redis Configuration

One set of connection settings serves the metadata store and the Celery
broker. Provides the process-wide connection manager and the repository
factory used by the app factory.
"""

import os
from typing import Optional

import redis

from dropvault.infrastructure.redis_repository import RedisConnectionManager, RedisRepository


class RedisConfig:
    """Redis settings from REDIS_* environment variables."""

    def __init__(self):
        self.host = os.getenv("REDIS_HOST", "localhost")
        self.port = int(os.getenv("REDIS_PORT", 6379))
        self.db = int(os.getenv("REDIS_DB", 0))
        self.password = os.getenv("REDIS_PASSWORD")
        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", 20))
        # Namespaces every DropVault key when the Redis is shared
        self.key_prefix = os.getenv("REDIS_KEY_PREFIX", "")

        # redis://[:password@]host:port/db, overrides the individual settings
        self.url = os.getenv("REDIS_URL")
        if self.url:
            connection_params = redis.connection.parse_url(self.url)
            self.host = connection_params.get("host", self.host)
            self.port = connection_params.get("port", self.port)
            self.db = connection_params.get("db", self.db)
            self.password = connection_params.get("password", self.password)

    def connection_url(self) -> str:
        """URL form of these settings, for clients that take a URL (Celery)."""
        if self.url:
            return self.url
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


_redis_manager: Optional[RedisConnectionManager] = None
_key_prefix = ""


def init_redis(config: Optional[RedisConfig] = None) -> RedisConnectionManager:
    """
    Initialize the process-wide Redis connection manager.

    Args:
        config: Redis configuration, read from the environment if None
    """
    global _redis_manager, _key_prefix

    if config is None:
        config = RedisConfig()

    _redis_manager = RedisConnectionManager(
        host=config.host,
        port=config.port,
        db=config.db,
        password=config.password,
        max_connections=config.max_connections,
    )
    _key_prefix = config.key_prefix
    return _redis_manager


def get_redis_repository(key_prefix: Optional[str] = None) -> RedisRepository:
    """
    Get a Redis repository on the shared connection pool.

    Args:
        key_prefix: Prefix for all keys, defaults to REDIS_KEY_PREFIX

    Raises:
        RuntimeError: If Redis is not initialized
    """
    if _redis_manager is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")

    prefix = _key_prefix if key_prefix is None else key_prefix
    return RedisRepository(_redis_manager.client, prefix)


def redis_health_check() -> bool:
    """True if Redis is initialized and answers PING."""
    if _redis_manager is None:
        return False

    return _redis_manager.health_check()
