"""
Sharing Repositories

Repository interface for project metadata persistence.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .entities import AccessLogEntry, ExpiredProject, Project, SharedFile


class ProjectRepository(ABC):
    """
    Abstract repository interface for projects, files and access logs.

    Write methods return False when the store rejected the write. Any method
    may raise when the store itself is unreachable.
    """

    @abstractmethod
    def create_project(self, project: Project) -> bool:
        """
        Store a new project row.

        Args:
            project: Project to store

        Returns:
            True if the row was written
        """
        ...

    @abstractmethod
    def create_files(self, files: List[SharedFile]) -> bool:
        """
        Store file rows for a project in one step.

        Args:
            files: File rows, all belonging to the same project

        Returns:
            True if every row was written
        """
        ...

    @abstractmethod
    def get_project(self, project_id: str) -> Optional[Project]:
        """Get a project by id, or None if unknown."""
        ...

    @abstractmethod
    def list_files(self, project_id: str) -> List[SharedFile]:
        """List the files of a project in upload order."""
        ...

    @abstractmethod
    def get_file(self, project_id: str, name: str) -> Optional[SharedFile]:
        """Get a single file of a project by its sanitized name."""
        ...

    @abstractmethod
    def delete_project(self, project_id: str) -> bool:
        """
        Hard-delete a project and its file rows.

        Only used to compensate a failed upload. Expired projects are
        soft-deleted with mark_deleted instead.
        """
        ...

    @abstractmethod
    def mark_deleted(
        self, project_id: str, deleted_at: datetime, reclaimed_bytes: int
    ) -> bool:
        """
        Soft-delete a project.

        A project that is already deleted keeps its first deletion time and
        the call still returns True.

        Returns:
            False if the project does not exist or the write failed
        """
        ...

    @abstractmethod
    def find_expired(self, now: datetime) -> List[ExpiredProject]:
        """Get all non-deleted projects with ``expires_at < now`` and their files."""
        ...

    @abstractmethod
    def append_access_log(self, entry: AccessLogEntry) -> bool:
        """Append an access log entry."""
        ...

    @abstractmethod
    def list_access_logs(self, project_id: str) -> List[AccessLogEntry]:
        """List the access log of a project, oldest first."""
        ...
