"""
Unit tests for the Redis configuration.
"""

import pytest

from dropvault.config import redis_config
from dropvault.config.redis_config import RedisConfig


@pytest.fixture
def redis_env(monkeypatch):
    for name in ("REDIS_URL", "REDIS_PASSWORD", "REDIS_KEY_PREFIX"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("REDIS_HOST", "cache.internal")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("REDIS_DB", "3")
    return monkeypatch


def test_connection_url_from_settings(redis_env):
    assert RedisConfig().connection_url() == "redis://cache.internal:6380/3"

    redis_env.setenv("REDIS_PASSWORD", "s3cret")
    assert RedisConfig().connection_url() == "redis://:s3cret@cache.internal:6380/3"


def test_redis_url_overrides_settings(redis_env):
    redis_env.setenv("REDIS_URL", "redis://other:6379/2")
    config = RedisConfig()

    assert (config.host, config.port, config.db) == ("other", 6379, 2)
    assert config.connection_url() == "redis://other:6379/2"


def test_repository_uses_configured_key_prefix(redis_env):
    redis_env.setenv("REDIS_KEY_PREFIX", "dropvault")
    redis_env.setattr(redis_config, "_redis_manager", None)
    redis_env.setattr(redis_config, "_key_prefix", "")

    with pytest.raises(RuntimeError):
        redis_config.get_redis_repository()

    redis_config.init_redis()

    assert redis_config.get_redis_repository().make_key("file_expiry") == "dropvault:file_expiry"
    assert redis_config.get_redis_repository("other").key_prefix == "other"


def test_health_check_false_before_init(monkeypatch):
    monkeypatch.setattr(redis_config, "_redis_manager", None)

    assert redis_config.redis_health_check() is False
