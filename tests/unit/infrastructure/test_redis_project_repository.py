"""
Unit tests for RedisProjectRepository against a mocked RedisRepository.
"""

from datetime import timedelta
from unittest.mock import MagicMock, Mock

import pytest
import redis

from sharebox.application.reaper_service import ExpiryReaper
from sharebox.infrastructure.password_hasher import WerkzeugPasswordHasher
from sharebox.infrastructure.redis_project_repository import EXPIRY_INDEX, RedisProjectRepository
from tests.fixtures import FIXED_NOW, MockBlobStore, create_project_with_files

HASHER = WerkzeugPasswordHasher("pbkdf2:sha256:1000")
LATER = FIXED_NOW + timedelta(days=8)


@pytest.fixture
def good_project():
    return create_project_with_files(HASHER, files=[("a.txt", 3)])


def _redis_repo(good_project, broken_row):
    """Index one unreadable project in front of a healthy one."""
    project, files = good_project

    def get_json(key):
        if key == "project:broken":
            if isinstance(broken_row, Exception):
                raise broken_row
            return broken_row
        return project.to_dict()

    redis_repo = Mock()
    redis_repo.index_below.return_value = ["broken", project.project_id]
    redis_repo.get_json.side_effect = get_json
    redis_repo.list_range.return_value = [f.name for f in files]
    redis_repo.get_many_json.return_value = [f.to_dict() for f in files]
    return redis_repo


class TestFindExpired:
    """Test loading expired projects from the expiry index."""

    @pytest.mark.parametrize("broken_row", [
        redis.ConnectionError("connection reset"),
        {"project_id": "broken"},
        {"project_id": "broken", "name": "x", "password_hash": "h",
         "created_at": "not a date", "expires_at": "not a date"},
    ])
    def test_unreadable_project_is_skipped(self, good_project, broken_row):
        """
        Test that one bad row does not hide the others.

        Verifies the healthy project is returned and the bad one stays
        indexed for the next run.
        """
        redis_repo = _redis_repo(good_project, broken_row)

        expired = RedisProjectRepository(redis_repo).find_expired(LATER)

        assert [e.project.project_id for e in expired] == [good_project[0].project_id]
        assert [f.name for f in expired[0].files] == ["a.txt"]
        redis_repo.index_remove.assert_not_called()

    def test_stale_entry_is_unindexed(self, good_project):
        redis_repo = _redis_repo(good_project, None)

        expired = RedisProjectRepository(redis_repo).find_expired(LATER)

        assert len(expired) == 1
        redis_repo.index_remove.assert_called_once_with(EXPIRY_INDEX, "broken")

    def test_index_failure_propagates(self):
        redis_repo = Mock()
        redis_repo.index_below.side_effect = redis.ConnectionError("down")

        with pytest.raises(redis.ConnectionError):
            RedisProjectRepository(redis_repo).find_expired(LATER)

    def test_reaper_cleans_healthy_project(self, good_project):
        project, files = good_project
        redis_repo = _redis_repo(good_project, {"project_id": "broken"})
        redis_repo.distributed_lock = MagicMock()
        blob_store = MockBlobStore()
        blob_store.put(files[0].storage_key, b"abc", "text/plain")

        report = ExpiryReaper(RedisProjectRepository(redis_repo), blob_store).execute(LATER)

        assert report.deleted_projects == 1
        assert report.projects[0].project_id == project.project_id
        assert blob_store.get_all_blobs() == {}
