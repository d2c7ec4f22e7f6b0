"""
Expiry Reaper

Batch process that reclaims expired projects and their blobs.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sharebox.domain.errors import DependencyError
from sharebox.domain.events import ProjectReapedEvent
from sharebox.domain.file_storage.blob_store import IBlobStore
from sharebox.domain.sharing.entities import ExpiredProject, utc_now
from sharebox.domain.sharing.repositories import ProjectRepository

logger = logging.getLogger(__name__)

PREVIEW = "preview"
EXECUTE = "execute"


@dataclass
class ProjectSummary:
    """One expired project in a cleanup report."""
    project_id: str
    name: str
    expired_at: datetime
    files_count: int
    total_size: int

    @classmethod
    def from_expired(cls, expired: ExpiredProject) -> "ProjectSummary":
        return cls(
            project_id=expired.project.project_id,
            name=expired.project.name,
            expired_at=expired.project.expires_at,
            files_count=len(expired.files),
            total_size=expired.total_size,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.project_id,
            "name": self.name,
            "expiredAt": self.expired_at.isoformat(),
            "filesCount": self.files_count,
            "totalSize": self.total_size,
        }


@dataclass
class CleanupReport:
    """
    Totals of one reaper run.

    Preview and execute produce the same shape; in preview mode the counts
    describe what would be deleted.
    """
    mode: str
    deleted_projects: int = 0
    deleted_files: int = 0
    total_size_deleted: int = 0
    failed_projects: int = 0
    failed_files: int = 0
    projects: List[ProjectSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "deletedProjects": self.deleted_projects,
            "deletedFiles": self.deleted_files,
            "totalSizeDeleted": self.total_size_deleted,
            "failedProjects": self.failed_projects,
            "failedFiles": self.failed_files,
            "projects": [p.to_dict() for p in self.projects],
        }


class ExpiryReaper:
    """
    Finds expired, non-deleted projects, deletes their blobs and soft-deletes
    them.

    Each project is processed independently. A project whose blobs could
    not all be removed is still marked deleted, with only the bytes actually
    removed counted as reclaimed.
    """

    def __init__(self, repository: ProjectRepository, blob_store: IBlobStore, event_publisher=None):
        """
        Initialize ExpiryReaper.

        Args:
            repository: Project metadata repository
            blob_store: Binary storage holding the project files
            event_publisher: Optional EventPublisher for domain events
        """
        self.repository = repository
        self.blob_store = blob_store
        self.event_publisher = event_publisher

    def run(self, mode: str = EXECUTE, now: Optional[datetime] = None) -> CleanupReport:
        if mode == PREVIEW:
            return self.preview(now)
        if mode == EXECUTE:
            return self.execute(now)
        raise ValueError(f"Unknown cleanup mode: {mode}")

    def preview(self, now: Optional[datetime] = None) -> CleanupReport:
        """
        Report what an execute run would delete, without mutating anything.

        Raises:
            DependencyError: Expired projects could not be listed
        """
        report = CleanupReport(mode=PREVIEW)
        for expired in self._find_expired(now or utc_now()):
            report.deleted_projects += 1
            report.deleted_files += len(expired.files)
            report.total_size_deleted += expired.total_size
            report.projects.append(ProjectSummary.from_expired(expired))
        return report

    def execute(self, now: Optional[datetime] = None) -> CleanupReport:
        """
        Delete blobs of every expired project and mark the projects deleted.

        Raises:
            DependencyError: Expired projects could not be listed
        """
        now = now or utc_now()
        report = CleanupReport(mode=EXECUTE)
        targets = self._find_expired(now)

        logger.info(f"Cleanup started: {len(targets)} expired project(s)")

        for expired in targets:
            project_id = expired.project.project_id
            try:
                deleted, failed, reclaimed = self._reap(expired, now)
            except Exception as e:
                report.failed_projects += 1
                logger.error(f"Cleanup failed for project {project_id}: {e}", exc_info=True)
                continue

            report.deleted_projects += 1
            report.deleted_files += deleted
            report.failed_files += failed
            report.total_size_deleted += reclaimed
            report.projects.append(ProjectSummary.from_expired(expired))

            if self.event_publisher:
                self.event_publisher.publish(ProjectReapedEvent(
                    aggregate_id=project_id,
                    occurred_at=now,
                    files_deleted=deleted,
                    files_failed=failed,
                    bytes_reclaimed=reclaimed,
                ))

        logger.info(
            f"Cleanup finished: {report.deleted_projects} project(s), "
            f"{report.deleted_files} file(s), {report.total_size_deleted} bytes reclaimed, "
            f"{report.failed_projects} project(s) and {report.failed_files} file(s) failed"
        )
        return report

    def _find_expired(self, now: datetime) -> List[ExpiredProject]:
        try:
            return [e for e in self.repository.find_expired(now) if not e.project.is_deleted]
        except Exception as e:
            raise DependencyError(f"Listing expired projects failed: {e}", original_error=e) from e

    def _reap(self, expired: ExpiredProject, now: datetime):
        """
        Returns:
            Tuple of (files deleted, files failed, bytes reclaimed)

        Raises:
            DependencyError: The project could not be marked deleted
        """
        project_id = expired.project.project_id
        keys = [f.storage_key for f in expired.files]

        results: Dict[str, bool] = {}
        if keys:
            try:
                results = self.blob_store.delete(keys)
            except Exception as e:
                logger.error(f"Blob deletion failed for project {project_id}: {e}", exc_info=True)

        deleted = [f for f in expired.files if results.get(f.storage_key)]
        for f in expired.files:
            if not results.get(f.storage_key):
                logger.warning(f"Could not delete blob {f.storage_key}")

        reclaimed = sum(f.size for f in deleted)
        if not self.repository.mark_deleted(project_id, now, reclaimed):
            raise DependencyError(f"Project {project_id} could not be marked deleted")

        return len(deleted), len(expired.files) - len(deleted), reclaimed
