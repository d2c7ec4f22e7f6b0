"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry user-facing messaging for API responses.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_REQUEST = "invalid_request"
    NO_FILES = "no_files"
    TOO_MANY_FILES = "too_many_files"
    FILE_TOO_LARGE = "file_too_large"
    PROJECT_TOO_LARGE = "project_too_large"
    FILE_TYPE_BLOCKED = "file_type_blocked"
    INVALID_PASSWORD_FORMAT = "invalid_password_format"
    PROJECT_NOT_FOUND = "project_not_found"
    FILE_NOT_FOUND = "file_not_found"
    ROOM_NOT_FOUND = "room_not_found"
    PROJECT_EXPIRED = "project_expired"
    PROJECT_DELETED = "project_deleted"
    INVALID_PASSWORD = "invalid_password"
    ADMIN_UNAUTHORIZED = "admin_unauthorized"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    UPLOAD_INCOMPLETE = "upload_incomplete"
    UPLOAD_SIZE_MISMATCH = "upload_size_mismatch"
    BLOB_ALREADY_STORED = "blob_already_stored"
    STORAGE_ERROR = "storage_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.NO_FILES: {
        "title": "No Files Selected",
        "message": "At least one file is required to create a share.",
        "action": "Select one or more files and upload again.",
    },
    ErrorCategory.TOO_MANY_FILES: {
        "title": "Too Many Files",
        "message": "The upload contains more files than a single share allows.",
        "action": "Split the files across several shares or archive them first.",
    },
    ErrorCategory.FILE_TOO_LARGE: {
        "title": "File Too Large",
        "message": "One or more files exceed the maximum allowed file size.",
        "action": "Compress or split the large files and try again.",
    },
    ErrorCategory.PROJECT_TOO_LARGE: {
        "title": "Share Too Large",
        "message": "The combined size of the files exceeds the maximum share size.",
        "action": "Upload fewer or smaller files.",
    },
    ErrorCategory.FILE_TYPE_BLOCKED: {
        "title": "File Type Not Allowed",
        "message": "Executable and script files cannot be shared.",
        "action": "Remove the blocked files or put them in an archive.",
    },
    ErrorCategory.INVALID_PASSWORD_FORMAT: {
        "title": "Invalid Password Format",
        "message": "The password does not have the expected format.",
        "action": "Check the password you received and enter it exactly.",
    },
    ErrorCategory.PROJECT_NOT_FOUND: {
        "title": "Share Not Found",
        "message": "The requested share does not exist.",
        "action": "Check the link you were given.",
    },
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The requested file is not part of this share.",
        "action": "Open the share again to see the available files.",
    },
    ErrorCategory.ROOM_NOT_FOUND: {
        "title": "Room Not Found",
        "message": "The requested text room does not exist or has expired.",
        "action": "Create a new room.",
    },
    ErrorCategory.PROJECT_EXPIRED: {
        "title": "Share Expired",
        "message": "This share has passed its expiry date and is no longer available.",
        "action": "Ask the sender to upload the files again.",
    },
    ErrorCategory.PROJECT_DELETED: {
        "title": "Share Deleted",
        "message": "This share has been removed and is no longer available.",
        "action": "Ask the sender to upload the files again.",
    },
    ErrorCategory.INVALID_PASSWORD: {
        "title": "Wrong Password",
        "message": "The password is not correct for this share.",
        "action": "Check the password and try again.",
    },
    ErrorCategory.ADMIN_UNAUTHORIZED: {
        "title": "Unauthorized",
        "message": "A valid administrator token is required.",
        "action": "Provide the token in the Authorization header.",
    },
    ErrorCategory.TOO_MANY_ATTEMPTS: {
        "title": "Too Many Attempts",
        "message": "Too many wrong passwords were entered for this share.",
        "action": "Please wait before trying again.",
    },
    ErrorCategory.UPLOAD_INCOMPLETE: {
        "title": "Upload Incomplete",
        "message": "Not every file of the share reached storage, so the share was discarded.",
        "action": "Start the upload again.",
    },
    ErrorCategory.UPLOAD_SIZE_MISMATCH: {
        "title": "Upload Size Mismatch",
        "message": "An uploaded file does not have the size announced for it.",
        "action": "Start the upload again with the correct file sizes.",
    },
    ErrorCategory.BLOB_ALREADY_STORED: {
        "title": "File Already Uploaded",
        "message": "This file has already been uploaded and cannot be replaced.",
        "action": "Finish the upload, or start a new share to change its files.",
    },
    ErrorCategory.STORAGE_ERROR: {
        "title": "Storage Error",
        "message": "The files could not be stored or retrieved.",
        "action": "Please try again later.",
    },
    ErrorCategory.SERVICE_UNAVAILABLE: {
        "title": "Service Unavailable",
        "message": "The service is not ready to handle this request.",
        "action": "Please try again in a few moments.",
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

    category = ErrorCategory.SYSTEM_ERROR

    def __init__(
        self,
        message: str,
        original_error: Exception = None,
        category: Optional[ErrorCategory] = None,
    ):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
            category: Overrides the class-level error category
        """
        super().__init__(message)
        self.original_error = original_error
        if category is not None:
            self.category = category


class ValidationError(DomainError):
    """
    Raised for bad client input.

    Covers missing fields, oversized files, blocked types, too many files
    and malformed passwords. Raised before any state is mutated.
    """

    category = ErrorCategory.INVALID_REQUEST

    def __init__(
        self,
        message: str,
        violations: Optional[List["FileViolation"]] = None,
        category: Optional[ErrorCategory] = None,
    ):
        super().__init__(message, category=category)
        self.violations = violations or []


class InvalidPasswordFormatError(ValidationError):
    """Raised when a password does not match the generation alphabet or length."""

    category = ErrorCategory.INVALID_PASSWORD_FORMAT


class NotFoundError(DomainError):
    """Raised for an unknown project, file or room."""

    category = ErrorCategory.PROJECT_NOT_FOUND


class GoneError(DomainError):
    """Raised for an expired or soft-deleted project."""

    category = ErrorCategory.PROJECT_EXPIRED


class UnauthorizedError(DomainError):
    """Raised when a password or admin token does not match."""

    category = ErrorCategory.INVALID_PASSWORD


class ConflictError(DomainError):
    """Raised when a write would replace content that must stay unchanged."""

    category = ErrorCategory.BLOB_ALREADY_STORED


class DependencyError(DomainError):
    """
    Raised when the metadata store or blob store fails.

    The message is meant for logs only. API responses never include it.
    """

    category = ErrorCategory.STORAGE_ERROR


class FileViolation:
    """A single reason a file in an upload batch was rejected."""

    def __init__(self, filename: str, category: ErrorCategory, detail: str):
        self.filename = filename
        self.category = category
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.filename,
            "error": self.category.value,
            "detail": self.detail,
        }

    def __repr__(self) -> str:
        return f"FileViolation({self.filename!r}, {self.category.value})"


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    This is an application-layer concern that bridges domain errors
    with user-facing error messages and HTTP responses.
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
        data.update(self.context)
        return data


class TooManyAttemptsError(ApplicationError):
    """Raised when the password attempt limit for a share is exceeded."""

    def __init__(
        self,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCategory.TOO_MANY_ATTEMPTS, technical_message, context)
        self.http_status_code = 429


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
        context: Additional fields merged into the response body
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code
