"""
API Models for Swagger documentation
"""

from flask_restx import fields

from tempshare.api.v1 import api

# =============================================================================
# Response Models
# =============================================================================

error_response = api.model(
    "ErrorResponse",
    {
        "error": fields.String(description="Machine-readable error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-facing error message"),
        "action": fields.String(description="Suggested next step"),
        "password_required": fields.Boolean(
            description="Present and true when a password must be supplied"
        ),
    },
)

upload_result = api.model(
    "UploadResult",
    {
        "id": fields.String(description="Share identifier"),
        "display_name": fields.String(description="Original filename"),
        "byte_size": fields.Integer(description="Stored size in bytes"),
        "expires_at": fields.DateTime(description="Expiry time (UTC)"),
        "has_password": fields.Boolean(description="Whether a password is required"),
        "share_url": fields.String(description="Public share link"),
        "access_count": fields.Integer(description="Successful downloads so far"),
    },
)

upload_failure = api.model(
    "UploadFailure",
    {
        "display_name": fields.String(description="Original filename"),
        "error": fields.String(description="Error category"),
        "message": fields.String(description="User-facing error message"),
    },
)

upload_response = api.model(
    "UploadResponse",
    {
        "files": fields.List(fields.Nested(upload_result)),
        "errors": fields.List(fields.Nested(upload_failure)),
    },
)

object_preview = api.model(
    "ObjectPreview",
    {
        "display_name": fields.String(description="Original filename"),
        "byte_size": fields.Integer(description="Size in bytes"),
        "content_type": fields.String(description="MIME type"),
        "has_password": fields.Boolean(description="Whether a password is required"),
        "access_count": fields.Integer(description="Successful downloads so far"),
        "expires_at": fields.DateTime(description="Expiry time (UTC)"),
        "is_expired": fields.Boolean(description="Whether the link has expired"),
    },
)

file_summary = api.model(
    "FileSummary",
    {
        "id": fields.String(description="Share identifier"),
        "display_name": fields.String(description="Original filename"),
        "byte_size": fields.Integer(description="Size in bytes"),
        "content_type": fields.String(description="MIME type"),
        "has_password": fields.Boolean(description="Whether a password is required"),
        "access_count": fields.Integer(description="Successful downloads so far"),
        "created_at": fields.DateTime(description="Upload time (UTC)"),
        "expires_at": fields.DateTime(description="Expiry time (UTC)"),
        "is_expired": fields.Boolean(description="Whether the link has expired"),
        "owner_id": fields.String(description="Uploader (admin listings only)"),
    },
)

file_list_response = api.model(
    "FileListResponse",
    {"files": fields.List(fields.Nested(file_summary))},
)

delete_response = api.model(
    "DeleteResponse",
    {"message": fields.String(description="Confirmation message")},
)

usage_stats = api.model(
    "UsageStats",
    {
        "total_objects": fields.Integer(description="Objects in the registry"),
        "active_objects": fields.Integer(description="Objects not yet expired"),
        "total_access_events": fields.Integer(description="Logged downloads"),
        "today_access_events": fields.Integer(
            description="Downloads since the start of the current UTC day"
        ),
        "total_bytes_stored": fields.Integer(description="Sum of object sizes"),
    },
)
