"""
Unit tests for the periodic cleanup task.
"""

from unittest.mock import Mock, patch

from sharebox.application.reaper_service import EXECUTE, CleanupReport, ExpiryReaper
from sharebox.tasks.cleanup_task import cleanup_expired_projects
from tests.fixtures import create_project_with_files


def _flask_app_with(reaper):
    flask_app = Mock()
    flask_app.container.resolve.return_value = reaper
    return flask_app


class TestCleanupTask:
    """Test the Celery wrapper around the reaper."""

    def test_reports_reaper_totals(self):
        reaper = Mock()
        reaper.execute.return_value = CleanupReport(
            mode=EXECUTE,
            deleted_projects=2,
            deleted_files=5,
            total_size_deleted=1024,
        )
        flask_app = _flask_app_with(reaper)

        with patch("celery_app.flask_app", flask_app):
            stats = cleanup_expired_projects()

        flask_app.container.resolve.assert_called_once_with(ExpiryReaper)
        assert stats == {
            "deleted_projects": 2,
            "deleted_files": 5,
            "bytes_reclaimed": 1024,
            "failed_projects": 0,
            "failed_files": 0,
            "errors": [],
        }

    def test_failed_projects_are_reported(self):
        reaper = Mock()
        reaper.execute.return_value = CleanupReport(mode=EXECUTE, deleted_projects=1,
                                                    failed_projects=2, failed_files=3)

        with patch("celery_app.flask_app", _flask_app_with(reaper)):
            stats = cleanup_expired_projects()

        assert (stats["failed_projects"], stats["failed_files"]) == (2, 3)
        assert stats["errors"] == ["2 project(s) could not be cleaned up"]

    def test_reaper_exception_is_reported(self):
        reaper = Mock()
        reaper.execute.side_effect = RuntimeError("redis down")

        with patch("celery_app.flask_app", _flask_app_with(reaper)):
            stats = cleanup_expired_projects()

        assert stats["deleted_projects"] == 0
        assert len(stats["errors"]) == 1
        assert "redis down" in stats["errors"][0]

    def test_missing_container(self):
        flask_app = Mock()
        flask_app.container = None

        with patch("celery_app.flask_app", flask_app):
            stats = cleanup_expired_projects()

        assert "Dependency container not initialized" in stats["errors"][0]

    def test_runs_real_reaper(self, reaper, project_repository, password_hasher):
        project, files = create_project_with_files(password_hasher, files=[("a.txt", 7)])
        project_repository.add(project, files)

        with patch("celery_app.flask_app", _flask_app_with(reaper)):
            stats = cleanup_expired_projects()

        assert stats["deleted_projects"] == 1
        assert stats["bytes_reclaimed"] == 7
        assert project.is_deleted is True
