"""
Redis Project Repository

Concrete Redis-based implementation of ProjectRepository.

Key layout (under the repository prefix):
    project:{id}                 project JSON
    project:{id}:files           ordered list of file names
    project:{id}:file:{name}     file JSON
    project:{id}:access_log      list of access log JSON entries
    projects:by_expiry           sorted set of live project ids scored by expiry
"""

import logging
from datetime import datetime
from typing import List, Optional

from sharebox.domain.sharing.entities import AccessLogEntry, ExpiredProject, Project, SharedFile
from sharebox.domain.sharing.repositories import ProjectRepository

from .redis_repository import RedisRepository

logger = logging.getLogger(__name__)

EXPIRY_INDEX = "projects:by_expiry"


class RedisProjectRepository(ProjectRepository):
    """
    Redis implementation of the project registry.

    Live projects are indexed by expiry so the reaper can find expired ones
    without scanning the keyspace. Soft-deleted projects leave the index.
    """

    def __init__(self, redis_repo: RedisRepository):
        """
        Initialize with Redis repository.

        Args:
            redis_repo: RedisRepository instance
        """
        self.redis_repo = redis_repo

    @staticmethod
    def _project_key(project_id: str) -> str:
        return f"project:{project_id}"

    @staticmethod
    def _names_key(project_id: str) -> str:
        return f"project:{project_id}:files"

    @staticmethod
    def _file_key(project_id: str, name: str) -> str:
        return f"project:{project_id}:file:{name}"

    @staticmethod
    def _log_key(project_id: str) -> str:
        return f"project:{project_id}:access_log"

    def create_project(self, project: Project) -> bool:
        stored = self.redis_repo.set_json(
            self._project_key(project.project_id), project.to_dict(), only_if_absent=True
        )
        if not stored:
            return False
        return self.redis_repo.index_add(
            EXPIRY_INDEX, project.project_id, project.expires_at.timestamp()
        )

    def create_files(self, files: List[SharedFile]) -> bool:
        if not files:
            return True
        project_id = files[0].project_id
        stored = self.redis_repo.set_many_json(
            (self._file_key(f.project_id, f.name), f.to_dict()) for f in files
        )
        if not stored:
            return False
        return self.redis_repo.list_append(self._names_key(project_id), [f.name for f in files])

    def get_project(self, project_id: str) -> Optional[Project]:
        data = self.redis_repo.get_json(self._project_key(project_id))
        if data is None:
            return None
        return Project.from_dict(data)

    def list_files(self, project_id: str) -> List[SharedFile]:
        names = self.redis_repo.list_range(self._names_key(project_id))
        documents = self.redis_repo.get_many_json(
            [self._file_key(project_id, name) for name in names]
        )
        return [SharedFile.from_dict(doc) for doc in documents if doc is not None]

    def get_file(self, project_id: str, name: str) -> Optional[SharedFile]:
        data = self.redis_repo.get_json(self._file_key(project_id, name))
        if data is None:
            return None
        return SharedFile.from_dict(data)

    def delete_project(self, project_id: str) -> bool:
        try:
            names = self.redis_repo.list_range(self._names_key(project_id))
        except Exception as e:
            logger.error(f"Could not list files of {project_id} for deletion: {e}")
            names = []

        keys = [self._project_key(project_id), self._names_key(project_id), self._log_key(project_id)]
        keys.extend(self._file_key(project_id, name) for name in names)

        removed = self.redis_repo.delete(*keys)
        unindexed = self.redis_repo.index_remove(EXPIRY_INDEX, project_id)
        return removed and unindexed

    def mark_deleted(self, project_id: str, deleted_at: datetime, reclaimed_bytes: int) -> bool:
        with self.redis_repo.distributed_lock(f"project:{project_id}"):
            project = self.get_project(project_id)
            if project is None:
                return False

            if project.mark_deleted(deleted_at, reclaimed_bytes):
                if not self.redis_repo.set_json(self._project_key(project_id), project.to_dict()):
                    return False

            return self.redis_repo.index_remove(EXPIRY_INDEX, project_id)

    def find_expired(self, now: datetime) -> List[ExpiredProject]:
        """
        Load every indexed project that expired before ``now``.

        A project that cannot be loaded is logged and skipped. It stays in
        the index so the next run retries it.

        Raises:
            redis.exceptions.RedisError: If the index itself cannot be read
        """
        expired = []
        for project_id in self.redis_repo.index_below(EXPIRY_INDEX, now.timestamp()):
            try:
                project = self.get_project(project_id)
                if project is None or project.is_deleted:
                    # Stale index entry
                    self.redis_repo.index_remove(EXPIRY_INDEX, project_id)
                    continue
                files = self.list_files(project_id)
            except Exception as e:
                logger.error(f"Skipping expired project {project_id}: {e}", exc_info=True)
                continue
            expired.append(ExpiredProject(project=project, files=files))
        return expired

    def append_access_log(self, entry: AccessLogEntry) -> bool:
        return self.redis_repo.append_json(self._log_key(entry.project_id), entry.to_dict())

    def list_access_logs(self, project_id: str) -> List[AccessLogEntry]:
        return [
            AccessLogEntry.from_dict(doc)
            for doc in self.redis_repo.range_json(self._log_key(project_id))
        ]
