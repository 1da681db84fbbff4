"""
Identifier Allocator

Draws random file identifiers and re-draws until one is free in the
metadata store.
"""

import logging
import uuid
from typing import Callable, Optional

from ..errors import AllocationExhaustedError
from .repositories import IFileRecordRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 1000


def random_file_id() -> str:
    """UUID4 string: 122 random bits."""
    return str(uuid.uuid4())


class IdentifierAllocator:
    """
    Allocates collision-free file identifiers.

    Random draws make collisions astronomically unlikely, but the allocator
    still checks the store and re-draws. Hitting max_attempts means the
    store is answering "exists" for everything, which is a malfunction.
    """

    def __init__(
        self,
        metadata_repository: IFileRecordRepository,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        generator: Optional[Callable[[], str]] = None,
    ):
        """
        Args:
            metadata_repository: Store consulted for existing identifiers
            max_attempts: Draws before giving up
            generator: Zero-argument identifier factory (defaults to UUID4)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.metadata_repo = metadata_repository
        self.max_attempts = max_attempts
        self.generator = generator or random_file_id

    def allocate(self) -> str:
        """
        Return an identifier that no record currently uses.

        Raises:
            AllocationExhaustedError: If every draw collided
        """
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generator()
            if not self.metadata_repo.exists_by_id(candidate):
                return candidate
            logger.warning(
                f"File id collision on attempt {attempt}/{self.max_attempts}: {candidate}"
            )

        logger.critical(
            f"Identifier allocation exhausted after {self.max_attempts} attempts; "
            "metadata store may be malfunctioning"
        )
        raise AllocationExhaustedError(
            f"Could not allocate a free file id after {self.max_attempts} attempts"
        )
