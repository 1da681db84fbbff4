"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions bridge them to user-facing messages and HTTP statuses.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_REQUEST = "invalid_request"
    FILE_TOO_LARGE = "file_too_large"
    FILE_NOT_FOUND = "file_not_found"
    FILE_EXPIRED = "file_expired"
    DOWNLOAD_LIMIT_REACHED = "download_limit_reached"
    ACCESS_DENIED = "access_denied"
    AUTHENTICATION_REQUIRED = "authentication_required"
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.FILE_TOO_LARGE: {
        "title": "File Too Large",
        "message": "The uploaded file exceeds the size limit for this upload type.",
        "action": "Upload a smaller file, or sign in for a larger limit.",
    },
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The requested file could not be found or has been deleted.",
        "action": "Check the file identifier and try again.",
    },
    ErrorCategory.FILE_EXPIRED: {
        "title": "File Not Found",
        "message": "The requested file could not be found or has expired.",
        "action": "Ask the sender to upload the file again.",
    },
    ErrorCategory.DOWNLOAD_LIMIT_REACHED: {
        "title": "Download Limit Reached",
        "message": "This file has been downloaded the maximum number of times.",
        "action": "Ask the sender to upload the file again.",
    },
    ErrorCategory.ACCESS_DENIED: {
        "title": "Access Denied",
        "message": "You are not allowed to access this file.",
        "action": "Sign in with the account that uploaded the file.",
    },
    ErrorCategory.AUTHENTICATION_REQUIRED: {
        "title": "Authentication Required",
        "message": "This operation requires a signed-in user.",
        "action": "Sign in and try again.",
    },
    ErrorCategory.STORAGE_ERROR: {
        "title": "Storage Error",
        "message": "The file could not be stored or retrieved.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions can optionally wrap the original error for context.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class ValidationError(DomainError):
    """Raised when a request is rejected before any store is touched."""
    pass


class PayloadTooLargeError(ValidationError):
    """Raised when an upload exceeds its tier's size limit."""

    def __init__(self, size_bytes: int, max_size_bytes: int):
        super().__init__(
            f"File size {size_bytes} bytes exceeds the limit of {max_size_bytes} bytes"
        )
        self.size_bytes = size_bytes
        self.max_size_bytes = max_size_bytes


class NotFoundError(DomainError):
    """Base class for anything that is absent, or treated as absent."""
    pass


class FileRecordNotFoundError(NotFoundError):
    """Raised when no metadata record exists for an identifier (or caller)."""
    pass


class FileExpiredError(NotFoundError):
    """
    Raised when a record exists but its expiry time has passed.

    Expired records are treated as absent for reads even before the
    reaper has physically removed them.
    """
    pass


class BlobNotFoundError(NotFoundError):
    """Raised when the stored bytes for a file are missing."""
    pass


class DownloadLimitExceededError(DomainError):
    """Raised when a file has reached its maximum number of downloads."""

    def __init__(self, file_id: str, max_downloads: int):
        super().__init__(
            f"File download limit reached for this file. (Max. {max_downloads} times)"
        )
        self.file_id = file_id
        self.max_downloads = max_downloads


class AccessDeniedError(DomainError):
    """Raised when a caller touches a private file it does not own."""
    pass


class StorageError(DomainError):
    """Base class for blob store and metadata store failures."""
    pass


class StorageWriteError(StorageError):
    """Raised when blob content cannot be written."""
    pass


class MetadataStoreError(StorageError):
    """Raised when the metadata store is unreachable or returns garbage."""
    pass


class DuplicateFileIdError(MetadataStoreError):
    """Raised when creating a record whose identifier already exists."""
    pass


class AllocationExhaustedError(DomainError):
    """
    Raised when identifier allocation keeps colliding.

    Random identifiers should practically never collide, so hitting the
    retry cap signals a metadata store malfunction rather than bad luck.
    """
    pass


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        detail: Optional[str] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
            detail: Client-safe detail, e.g. the violated threshold
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}
        self.detail = detail

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        payload = {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
        if self.detail:
            payload["detail"] = self.detail
        return payload


# Ordered most specific first; the first isinstance match wins.
_CATEGORY_BY_ERROR = (
    (PayloadTooLargeError, ErrorCategory.FILE_TOO_LARGE, 400),
    (ValidationError, ErrorCategory.INVALID_REQUEST, 400),
    (FileExpiredError, ErrorCategory.FILE_EXPIRED, 404),
    (NotFoundError, ErrorCategory.FILE_NOT_FOUND, 404),
    (DownloadLimitExceededError, ErrorCategory.DOWNLOAD_LIMIT_REACHED, 400),
    (AccessDeniedError, ErrorCategory.ACCESS_DENIED, 403),
    (StorageError, ErrorCategory.STORAGE_ERROR, 500),
)


def categorize_error(error: Exception) -> tuple[ErrorCategory, int]:
    """
    Map an exception to its error category and HTTP status code.

    Anything that is not a known domain error is a 500 system error,
    including AllocationExhaustedError.
    """
    for error_type, category, status_code in _CATEGORY_BY_ERROR:
        if isinstance(error, error_type):
            return category, status_code
    return ErrorCategory.SYSTEM_ERROR, 500


def is_client_error(error: Exception) -> bool:
    """True when the error's message is safe and useful to show the client."""
    return categorize_error(error)[1] < 500


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
    detail: Optional[str] = None,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional context information
        status_code: HTTP status code
        detail: Client-safe detail included in the body

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context, detail)
    return error.to_dict(), status_code
