"""
Upload Policy Configuration

Reads the per-tier size, expiry and download limits from the environment
once at start-up and turns them into an immutable PolicyTable.
"""

import os
from typing import Mapping, Optional

from dropvault.domain.file_lifecycle.value_objects import PolicyTable, TierPolicy

GIB = 1024 ** 3

DEFAULT_PUBLIC_MAX_SIZE_BYTES = 1 * GIB
DEFAULT_PUBLIC_EXPIRY_DAYS = 7
DEFAULT_PUBLIC_MAX_DOWNLOADS = 3

DEFAULT_USER_MAX_SIZE_BYTES = 5 * GIB
DEFAULT_USER_EXPIRY_DAYS = 30
DEFAULT_USER_MAX_DOWNLOADS = 100


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


class UploadPolicyConfig:
    """Upload policy settings."""

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        """
        Args:
            env: Mapping to read from, defaults to os.environ
        """
        env = os.environ if env is None else env

        self.public_max_size_bytes = _int_setting(
            env, "PUBLIC_MAX_SIZE_BYTES", DEFAULT_PUBLIC_MAX_SIZE_BYTES
        )
        self.public_expiry_days = _int_setting(
            env, "PUBLIC_EXPIRY_DAYS", DEFAULT_PUBLIC_EXPIRY_DAYS
        )
        self.public_max_downloads = _int_setting(
            env, "PUBLIC_MAX_DOWNLOADS", DEFAULT_PUBLIC_MAX_DOWNLOADS
        )

        self.user_max_size_bytes = _int_setting(
            env, "USER_MAX_SIZE_BYTES", DEFAULT_USER_MAX_SIZE_BYTES
        )
        self.user_expiry_days = _int_setting(env, "USER_EXPIRY_DAYS", DEFAULT_USER_EXPIRY_DAYS)
        self.user_max_downloads = _int_setting(
            env, "USER_MAX_DOWNLOADS", DEFAULT_USER_MAX_DOWNLOADS
        )

    def to_policy_table(self) -> PolicyTable:
        """
        Build the policy table.

        Raises:
            ValidationError: If any value is not a positive integer
        """
        return PolicyTable(
            public=TierPolicy(
                max_size_bytes=self.public_max_size_bytes,
                expiry_days=self.public_expiry_days,
                max_downloads=self.public_max_downloads,
            ),
            user=TierPolicy(
                max_size_bytes=self.user_max_size_bytes,
                expiry_days=self.user_expiry_days,
                max_downloads=self.user_max_downloads,
            ),
        )
