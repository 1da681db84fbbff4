"""
File Lifecycle Value Objects

Immutable value objects for tiers, visibility and upload policy.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import ValidationError

UNKNOWN_FILENAME = "unknown"

# A stored-name suffix: a dot plus a short run of filename-safe characters.
_SAFE_EXTENSION = re.compile(r"\.[A-Za-z0-9_+-]{1,16}")


class Visibility(Enum):
    """Who may download a file."""

    PUBLIC = "public"
    PRIVATE = "private"


class Tier(Enum):
    """Upload tier, which selects the size/expiry/download policy."""

    PUBLIC = "public"
    USER = "user"

    @property
    def visibility(self) -> Visibility:
        return Visibility.PUBLIC if self is Tier.PUBLIC else Visibility.PRIVATE

    @classmethod
    def for_visibility(cls, visibility: Visibility) -> "Tier":
        return cls.PUBLIC if visibility is Visibility.PUBLIC else cls.USER


@dataclass(frozen=True)
class TierPolicy:
    """
    Limits applied to one upload tier.

    Attributes:
        max_size_bytes: Largest accepted upload, inclusive
        expiry_days: Days between upload and expiry
        max_downloads: Number of downloads accepted before the file is locked
    """
    max_size_bytes: int
    expiry_days: int
    max_downloads: int

    def __post_init__(self):
        for name in ("max_size_bytes", "expiry_days", "max_downloads"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValidationError(f"{name} must be a positive integer, got {value!r}")

    def to_dict(self) -> Dict[str, int]:
        return {
            "max_size_bytes": self.max_size_bytes,
            "expiry_days": self.expiry_days,
            "max_downloads": self.max_downloads,
        }


@dataclass(frozen=True)
class PolicyTable:
    """
    Per-tier upload policy.

    Built once at process start and injected into the engine. Values are
    read at request time and never mutated.
    """
    public: TierPolicy
    user: TierPolicy

    def for_tier(self, tier: Tier) -> TierPolicy:
        return self.public if tier is Tier.PUBLIC else self.user

    def for_visibility(self, visibility: Visibility) -> TierPolicy:
        return self.for_tier(Tier.for_visibility(visibility))

    def to_dict(self) -> Dict[str, Any]:
        return {
            Tier.PUBLIC.value: self.public.to_dict(),
            Tier.USER.value: self.user.to_dict(),
        }


def normalize_filename(filename: Optional[str]) -> str:
    """Return the display filename, or "unknown" when absent or blank."""
    if filename is None or not filename.strip():
        return UNKNOWN_FILENAME
    return filename


def extension_of(filename: Optional[str]) -> str:
    """
    Derive the stored-name extension from an original filename.

    Takes the substring from the last '.' onward. Anything that is not a
    short plain suffix (path separators, '..', control characters, a
    trailing dot) yields an empty extension, so the original name never
    reaches the filesystem namespace.

    >>> extension_of("report.final.pdf")
    '.pdf'
    >>> extension_of("../../etc/passwd")
    ''
    """
    if not filename or "." not in filename:
        return ""
    candidate = filename[filename.rindex("."):]
    if _SAFE_EXTENSION.fullmatch(candidate):
        return candidate
    return ""


def blob_name(file_id: str, extension: str) -> str:
    """Stored blob name: identifier followed by the extension."""
    return f"{file_id}{extension}"
