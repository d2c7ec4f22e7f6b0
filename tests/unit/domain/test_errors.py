"""
Unit tests for error categories and the API error payload.
"""

from sharebox.domain.errors import (
    ERROR_MESSAGES,
    ApplicationError,
    DependencyError,
    ErrorCategory,
    FileViolation,
    GoneError,
    NotFoundError,
    ValidationError,
    create_error_response,
)


class TestErrorMessages:
    """Test user-facing messages."""

    def test_every_category_has_a_message(self):
        for category in ErrorCategory:
            assert set(ERROR_MESSAGES[category]) == {"title", "message", "action"}

    def test_application_error_payload(self):
        error = ApplicationError(ErrorCategory.PROJECT_EXPIRED, "internal detail", {"extra": 1})

        data = error.to_dict()

        assert data["error"] == "project_expired"
        assert data["title"] == "Share Expired"
        assert data["extra"] == 1
        assert "internal detail" not in str(data)

    def test_create_error_response(self):
        body, status = create_error_response(ErrorCategory.ROOM_NOT_FOUND, status_code=404)

        assert status == 404
        assert body["error"] == "room_not_found"


class TestDomainErrors:
    """Test domain exception categories."""

    def test_default_categories(self):
        assert NotFoundError("x").category == ErrorCategory.PROJECT_NOT_FOUND
        assert GoneError("x").category == ErrorCategory.PROJECT_EXPIRED
        assert DependencyError("x").category == ErrorCategory.STORAGE_ERROR

    def test_category_override_is_per_instance(self):
        error = GoneError("x", category=ErrorCategory.PROJECT_DELETED)

        assert error.category == ErrorCategory.PROJECT_DELETED
        assert GoneError("y").category == ErrorCategory.PROJECT_EXPIRED

    def test_original_error_is_kept(self):
        cause = OSError("disk full")

        assert DependencyError("write failed", original_error=cause).original_error is cause

    def test_validation_violations(self):
        violation = FileViolation("a.exe", ErrorCategory.FILE_TYPE_BLOCKED, "blocked")
        error = ValidationError("bad batch", violations=[violation])

        assert error.violations == [violation]
        assert violation.to_dict() == {
            "file": "a.exe",
            "error": "file_type_blocked",
            "detail": "blocked",
        }
