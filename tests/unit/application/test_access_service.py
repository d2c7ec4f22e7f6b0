"""
Unit tests for ShareAccessService.
"""

from datetime import timedelta

import pytest

from sharebox.application.access_service import ShareAccessService
from sharebox.domain.attempt_limiting.services import CounterAttemptPolicy
from sharebox.domain.attempt_limiting.value_objects import AttemptLimit
from sharebox.domain.errors import (
    ErrorCategory,
    GoneError,
    NotFoundError,
    TooManyAttemptsError,
    UnauthorizedError,
    ValidationError,
)
from sharebox.domain.events import ProjectAccessedEvent
from tests.fixtures import FIXED_NOW, TEST_PASSWORD, MockAttemptRepository, create_project_with_files

WRONG_PASSWORD = "zzzzzzzzzzzz"


@pytest.fixture
def seeded(project_repository, blob_store, password_hasher):
    project, files = create_project_with_files(
        password_hasher, files=[("a.txt", 5), ("b.txt", 6)]
    )
    project_repository.add(project, files)
    blob_store.put(files[0].storage_key, b"hello", "text/plain")
    blob_store.put(files[1].storage_key, b"world!", "text/plain")
    blob_store.clear_call_history()
    return project, files


@pytest.fixture
def limited_service(access_gate, project_repository, blob_store):
    return ShareAccessService(
        access_gate,
        project_repository,
        blob_store,
        attempt_policy=CounterAttemptPolicy(
            MockAttemptRepository(), AttemptLimit(max_attempts=2, window_seconds=60)
        ),
    )


class TestListProject:
    """Test authenticated listing."""

    def test_listing_shape(self, access_service, seeded):
        project, _ = seeded

        listing = access_service.list_project(project.project_id, TEST_PASSWORD, now=FIXED_NOW)

        assert listing["projectId"] == project.project_id
        assert listing["projectName"] == project.name
        assert listing["totalSize"] == 11
        assert listing["expiresAt"] == project.expires_at.isoformat()
        assert [f["name"] for f in listing["files"]] == ["a.txt", "b.txt"]
        assert listing["files"][0]["downloadPath"] == f"/api/v1/download/{project.project_id}/a.txt"

    def test_access_is_logged(self, access_service, project_repository, event_publisher, seeded):
        project, _ = seeded

        access_service.list_project(project.project_id, TEST_PASSWORD,
                                    client_ip="1.2.3.4", user_agent="curl/8", now=FIXED_NOW)

        [entry] = project_repository.list_access_logs(project.project_id)
        assert (entry.client_ip, entry.user_agent, entry.action) == ("1.2.3.4", "curl/8", "list")
        [event] = [e for e in event_publisher.published if isinstance(e, ProjectAccessedEvent)]
        assert event.action == "list"

    def test_log_failure_does_not_fail_access(self, access_service, project_repository, seeded):
        project, _ = seeded
        project_repository.fail_on("append_access_log", RuntimeError("redis down"))

        listing = access_service.list_project(project.project_id, TEST_PASSWORD, now=FIXED_NOW)

        assert listing["projectId"] == project.project_id

    def test_failed_access_is_not_logged(self, access_service, project_repository, seeded):
        project, _ = seeded

        with pytest.raises(UnauthorizedError):
            access_service.list_project(project.project_id, WRONG_PASSWORD, now=FIXED_NOW)

        assert project_repository.list_access_logs(project.project_id) == []

    def test_expired_project(self, access_service, seeded):
        project, _ = seeded

        with pytest.raises(GoneError):
            access_service.list_project(project.project_id, TEST_PASSWORD,
                                        now=project.expires_at + timedelta(seconds=1))


class TestGetDownload:
    """Test download descriptors."""

    def test_stream_mode_returns_bytes(self, access_service, seeded):
        project, files = seeded

        descriptor = access_service.get_download(project.project_id, "b.txt", TEST_PASSWORD,
                                                 now=FIXED_NOW)

        assert descriptor.mode == "stream"
        assert descriptor.content == b"world!"
        assert descriptor.file == files[1]

    def test_redirect_mode_signs_url(self, access_service, blob_store, seeded):
        project, _ = seeded

        descriptor = access_service.get_download(project.project_id, "a.txt", TEST_PASSWORD,
                                                 mode="redirect", now=FIXED_NOW)

        assert descriptor.url.startswith("https://blobs.example.com/")
        [call] = blob_store.calls_to("sign")
        assert call["args"] == {"key": f"{project.project_id}/a.txt", "ttl_seconds": 300,
                                "filename": "a.txt"}
        assert blob_store.calls_to("get") == []

    def test_unknown_mode(self, access_service, project_repository, seeded):
        project, _ = seeded

        with pytest.raises(ValidationError):
            access_service.get_download(project.project_id, "a.txt", TEST_PASSWORD, mode="zip")

        assert project_repository.calls_to("get_project") == []

    def test_unknown_file(self, access_service, seeded):
        project, _ = seeded

        with pytest.raises(NotFoundError) as exc_info:
            access_service.get_download(project.project_id, "c.txt", TEST_PASSWORD, now=FIXED_NOW)

        assert exc_info.value.category == ErrorCategory.FILE_NOT_FOUND

    def test_missing_blob(self, access_service, blob_store, seeded):
        project, files = seeded
        blob_store.delete([files[0].storage_key])

        with pytest.raises(NotFoundError):
            access_service.get_download(project.project_id, "a.txt", TEST_PASSWORD, now=FIXED_NOW)

    def test_download_is_logged_with_file_name(self, access_service, project_repository, seeded):
        project, _ = seeded

        access_service.get_download(project.project_id, "a.txt", TEST_PASSWORD, now=FIXED_NOW)

        [entry] = project_repository.list_access_logs(project.project_id)
        assert (entry.action, entry.file_name) == ("download", "a.txt")


class TestAttemptLimiting:
    """Test the attempt policy around the gate."""

    def test_lockout_after_wrong_passwords(self, limited_service, seeded):
        project, _ = seeded

        for _ in range(2):
            with pytest.raises(UnauthorizedError):
                limited_service.list_project(project.project_id, WRONG_PASSWORD,
                                             client_ip="1.2.3.4", now=FIXED_NOW)

        with pytest.raises(TooManyAttemptsError):
            limited_service.list_project(project.project_id, TEST_PASSWORD,
                                         client_ip="1.2.3.4", now=FIXED_NOW)

    def test_success_resets_counter(self, limited_service, seeded):
        project, _ = seeded

        with pytest.raises(UnauthorizedError):
            limited_service.list_project(project.project_id, WRONG_PASSWORD,
                                         client_ip="1.2.3.4", now=FIXED_NOW)
        limited_service.list_project(project.project_id, TEST_PASSWORD,
                                     client_ip="1.2.3.4", now=FIXED_NOW)
        with pytest.raises(UnauthorizedError):
            limited_service.list_project(project.project_id, WRONG_PASSWORD,
                                         client_ip="1.2.3.4", now=FIXED_NOW)

        limited_service.list_project(project.project_id, TEST_PASSWORD,
                                     client_ip="1.2.3.4", now=FIXED_NOW)

    def test_malformed_password_is_not_counted(self, limited_service, seeded):
        project, _ = seeded

        for _ in range(5):
            with pytest.raises(ValidationError):
                limited_service.list_project(project.project_id, "bad",
                                             client_ip="1.2.3.4", now=FIXED_NOW)

        limited_service.list_project(project.project_id, TEST_PASSWORD,
                                     client_ip="1.2.3.4", now=FIXED_NOW)
