"""
Identity Value Objects

The engine never authenticates anyone. An external identity provider hands
it an Owner reference, which is all it needs for ownership checks.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Owner:
    """
    Immutable reference to an authenticated user.

    Equality and hashing use user_id only; username is a display name
    that may be missing when the owner was loaded without resolving it.
    """
    user_id: str
    username: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.user_id or not str(self.user_id).strip():
            raise ValueError("Owner user_id cannot be empty")

    @property
    def display_name(self) -> str:
        return self.username or self.user_id

    def __str__(self) -> str:
        return self.user_id
