"""
API Models for request/response validation and Swagger documentation
"""

from flask_restx import fields
from werkzeug.datastructures import FileStorage

from dropvault.api.v1 import api

# =============================================================================
# Request Models
# =============================================================================

upload_parser = api.parser()
upload_parser.add_argument(
    "file", location="files", type=FileStorage, required=True, help="File to upload"
)

# =============================================================================
# Response Models
# =============================================================================

upload_response = api.model(
    "UploadResponse",
    {
        "id": fields.String(description="File identifier"),
    },
)

user_upload_response = api.model(
    "UserUploadResponse",
    {
        "id": fields.String(description="File identifier"),
        "message": fields.String(description="Confirmation message"),
    },
)

file_info = api.model(
    "FileInfo",
    {
        "id": fields.String(description="File identifier"),
        "filename": fields.String(description="Original filename ('unknown' if none was given)"),
        "size_bytes": fields.Integer(description="Stored size in bytes"),
        "mime_type": fields.String(description="Content type given at upload", allow_null=True),
        "uploaded_at": fields.String(description="Upload time (ISO timestamp, UTC)"),
        "expires_at": fields.String(description="Expiry time (ISO timestamp, UTC)"),
        "download_count": fields.Integer(description="Downloads so far"),
        "max_downloads": fields.Integer(description="Download limit for this tier"),
        "remaining_downloads": fields.Integer(description="Downloads left"),
        "is_public": fields.Boolean(description="True for anonymous uploads"),
        "owner_username": fields.String(description="Owner display name", allow_null=True),
    },
)

message_response = api.model(
    "MessageResponse",
    {
        "message": fields.String(description="Confirmation message"),
    },
)

tier_limits = api.model(
    "TierLimits",
    {
        "max_size_bytes": fields.Integer(description="Largest accepted upload"),
        "expiry_days": fields.Integer(description="Days until a file expires"),
        "max_downloads": fields.Integer(description="Downloads before a file is locked"),
    },
)

upload_limits_response = api.model(
    "UploadLimitsResponse",
    {
        "public": fields.Nested(tier_limits, description="Anonymous uploads"),
        "user": fields.Nested(tier_limits, description="Signed-in uploads"),
    },
)

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing message"),
        "action": fields.String(description="Suggested next step"),
        "detail": fields.String(description="Specific reason, e.g. the limit hit", allow_null=True),
    },
)
