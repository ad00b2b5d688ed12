"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry user-facing messaging for API responses.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_REQUEST = "invalid_request"
    AUTHENTICATION_REQUIRED = "authentication_required"
    OBJECT_NOT_FOUND = "object_not_found"
    OBJECT_EXPIRED = "object_expired"
    PASSWORD_REQUIRED = "password_required"
    INVALID_PASSWORD = "invalid_password"
    FORBIDDEN = "forbidden"
    STORAGE_CONFLICT = "storage_conflict"
    UPLOAD_FAILED = "upload_failed"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.AUTHENTICATION_REQUIRED: {
        "title": "Authentication Required",
        "message": "You need to be signed in to perform this action.",
        "action": "Sign in and try again.",
    },
    ErrorCategory.OBJECT_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The requested file could not be found or has been deleted.",
        "action": "Check the link or ask the owner to share the file again.",
    },
    ErrorCategory.OBJECT_EXPIRED: {
        "title": "Link Expired",
        "message": "This share link has expired. Files are available for 24 hours after upload.",
        "action": "Ask the owner to upload the file again.",
    },
    ErrorCategory.PASSWORD_REQUIRED: {
        "title": "Password Required",
        "message": "This file is protected with a password.",
        "action": "Enter the password provided by the owner.",
    },
    ErrorCategory.INVALID_PASSWORD: {
        "title": "Invalid Password",
        "message": "The password you entered is not correct.",
        "action": "Check the password and try again.",
    },
    ErrorCategory.FORBIDDEN: {
        "title": "Access Denied",
        "message": "You do not have permission to modify this file.",
        "action": "Only the owner of a file or an administrator can delete it.",
    },
    ErrorCategory.STORAGE_CONFLICT: {
        "title": "Storage Conflict",
        "message": "The file could not be retrieved because of an internal inconsistency.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
    ErrorCategory.UPLOAD_FAILED: {
        "title": "Upload Failed",
        "message": "The file could not be stored.",
        "action": "Please try uploading the file again.",
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

    Domain exceptions are pure and have no external dependencies.
    They can optionally wrap original errors for context.
    """

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class ShareError(DomainError):
    """
    Base exception for share lifecycle outcomes.

    Every subclass names the ErrorCategory it surfaces as, so callers can
    map outcomes to stable, machine-distinguishable responses.
    """

    category: ErrorCategory = ErrorCategory.SYSTEM_ERROR


class ObjectNotFoundError(ShareError):
    """Raised when no shared object exists for an identifier."""

    category = ErrorCategory.OBJECT_NOT_FOUND


class ObjectGoneError(ShareError):
    """Raised when a shared object exists but its retention window has passed."""

    category = ErrorCategory.OBJECT_EXPIRED


class PasswordRequiredError(ShareError):
    """Raised when a protected object is requested without a password."""

    category = ErrorCategory.PASSWORD_REQUIRED


class InvalidPasswordError(ShareError):
    """Raised when the supplied password does not match the verifier."""

    category = ErrorCategory.INVALID_PASSWORD


class ForbiddenError(ShareError):
    """Raised when the caller is neither the owner nor an administrator."""

    category = ErrorCategory.FORBIDDEN


class ObjectConflictError(ShareError):
    """
    Raised on an internal inconsistency between registry and object store.

    A record whose bytes are missing is a correctness bug, not a user error.
    """

    category = ErrorCategory.STORAGE_CONFLICT


class IdCollisionError(ObjectConflictError):
    """Raised by a registry when a record with the same identifier already exists."""


class BlobNotFoundError(DomainError):
    """Raised by an object store when a locator does not resolve to bytes."""


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
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

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
        data = {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
        # Clients branch on this flag to show a password prompt
        if self.category == ErrorCategory.PASSWORD_REQUIRED:
            data["password_required"] = True
        return data


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional context information
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code
