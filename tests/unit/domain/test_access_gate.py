"""
Unit tests for the AccessGate.

The gate's checks run in a fixed order and stop at the first failure, so
each test sets up a project that fails exactly where it should.
"""

from datetime import timedelta

import pytest

from sharebox.domain.errors import (
    DependencyError,
    ErrorCategory,
    GoneError,
    InvalidPasswordFormatError,
    NotFoundError,
    UnauthorizedError,
)
from sharebox.domain.sharing.value_objects import AccessState
from tests.fixtures import FIXED_NOW, TEST_PASSWORD, create_project_with_files

WRONG_PASSWORD = "zzzzzzzzzzzz"


@pytest.fixture
def seeded(project_repository, password_hasher):
    project, files = create_project_with_files(
        password_hasher, files=[("a.txt", 10), ("b.txt", 20)]
    )
    project_repository.add(project, files)
    return project, files


class TestAuthorizeOrdering:
    """Test that the first failing check decides the outcome."""

    def test_malformed_password_does_no_lookup(self, access_gate, project_repository, seeded):
        project, _ = seeded

        with pytest.raises(InvalidPasswordFormatError):
            access_gate.authorize(project.project_id, "short", now=FIXED_NOW)

        assert project_repository.calls_to("get_project") == []

    def test_unknown_project(self, access_gate):
        with pytest.raises(NotFoundError) as exc_info:
            access_gate.authorize("missing", TEST_PASSWORD, now=FIXED_NOW)

        assert exc_info.value.category == ErrorCategory.PROJECT_NOT_FOUND

    def test_deleted_wins_over_expired_and_wrong_password(self, access_gate, seeded):
        project, _ = seeded
        project.mark_deleted(FIXED_NOW, 0)
        later = project.expires_at + timedelta(days=1)

        with pytest.raises(GoneError) as exc_info:
            access_gate.authorize(project.project_id, WRONG_PASSWORD, now=later)

        assert exc_info.value.category == ErrorCategory.PROJECT_DELETED

    def test_expired_wins_over_wrong_password(self, access_gate, seeded):
        project, _ = seeded
        later = project.expires_at + timedelta(seconds=1)

        with pytest.raises(GoneError) as exc_info:
            access_gate.authorize(project.project_id, WRONG_PASSWORD, now=later)

        assert exc_info.value.category == ErrorCategory.PROJECT_EXPIRED

    def test_wrong_password(self, access_gate, seeded):
        project, _ = seeded

        with pytest.raises(UnauthorizedError):
            access_gate.authorize(project.project_id, WRONG_PASSWORD, now=FIXED_NOW)


class TestAuthorizeSuccess:
    """Test granted access."""

    def test_trail_runs_through_every_state(self, access_gate, seeded):
        project, _ = seeded

        grant = access_gate.authorize(project.project_id, TEST_PASSWORD, now=FIXED_NOW)

        assert grant.project.project_id == project.project_id
        assert grant.state == AccessState.GRANTED
        assert grant.trail == [
            AccessState.PENDING,
            AccessState.PASSWORD_FORMAT_CHECKED,
            AccessState.PROJECT_FOUND,
            AccessState.NOT_DELETED,
            AccessState.NOT_EXPIRED,
            AccessState.PASSWORD_MATCHED,
            AccessState.GRANTED,
        ]

    def test_expiry_instant_is_granted(self, access_gate, seeded):
        project, _ = seeded

        grant = access_gate.authorize(project.project_id, TEST_PASSWORD, now=project.expires_at)

        assert grant.state == AccessState.GRANTED


class TestFileLookup:
    """Test file access inside a granted project."""

    def test_find_file(self, access_gate, seeded):
        project, files = seeded
        grant = access_gate.authorize(project.project_id, TEST_PASSWORD, now=FIXED_NOW)

        assert access_gate.find_file(grant, "b.txt") == files[1]

    def test_missing_file(self, access_gate, seeded):
        project, _ = seeded
        grant = access_gate.authorize(project.project_id, TEST_PASSWORD, now=FIXED_NOW)

        with pytest.raises(NotFoundError) as exc_info:
            access_gate.find_file(grant, "c.txt")

        assert exc_info.value.category == ErrorCategory.FILE_NOT_FOUND

    def test_list_files_in_upload_order(self, access_gate, seeded):
        project, _ = seeded
        grant = access_gate.authorize(project.project_id, TEST_PASSWORD, now=FIXED_NOW)

        assert [f.name for f in access_gate.list_files(grant)] == ["a.txt", "b.txt"]


class TestStoreFailures:
    """Test that store failures surface as DependencyError."""

    def test_lookup_failure(self, access_gate, project_repository, seeded):
        project, _ = seeded
        project_repository.fail_on("get_project", ConnectionError("redis down"))

        with pytest.raises(DependencyError):
            access_gate.authorize(project.project_id, TEST_PASSWORD, now=FIXED_NOW)

    def test_listing_failure(self, access_gate, project_repository, seeded):
        project, _ = seeded
        grant = access_gate.authorize(project.project_id, TEST_PASSWORD, now=FIXED_NOW)
        project_repository.fail_on("list_files", ConnectionError("redis down"))

        with pytest.raises(DependencyError):
            access_gate.list_files(grant)
