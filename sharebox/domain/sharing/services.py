"""
Sharing Domain Services

Access gate and password hashing contract with zero external dependencies.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..errors import (
    DependencyError,
    ErrorCategory,
    GoneError,
    NotFoundError,
    UnauthorizedError,
)
from .entities import Project, SharedFile, utc_now
from .repositories import ProjectRepository
from .value_objects import AccessState, SharePassword

logger = logging.getLogger(__name__)


class IPasswordHasher(ABC):
    """Hashes share passwords and verifies candidates against stored hashes."""

    @abstractmethod
    def hash(self, password: SharePassword) -> str:
        ...

    @abstractmethod
    def verify(self, password_hash: str, candidate: SharePassword) -> bool:
        ...


@dataclass
class AccessGrant:
    """
    Result of a successful pass through the access gate.

    Attributes:
        project: The granted project
        trail: Gate states passed through, ending in GRANTED
    """
    project: Project
    trail: List[AccessState] = field(default_factory=list)

    @property
    def state(self) -> AccessState:
        return self.trail[-1] if self.trail else AccessState.PENDING


class AccessGate:
    """
    Domain service deciding whether a password opens a project.

    Checks run strictly in order and stop at the first failure:
    password format, project found, not deleted, not expired,
    password matched.
    """

    def __init__(self, repository: ProjectRepository, password_hasher: IPasswordHasher):
        """
        Initialize with repository and hasher.

        Args:
            repository: Project metadata repository
            password_hasher: Hasher used to verify passwords
        """
        self.repository = repository
        self.password_hasher = password_hasher

    def authorize(
        self, project_id: str, password: Optional[str], now: Optional[datetime] = None
    ) -> AccessGrant:
        """
        Run an access attempt through the gate.

        Args:
            project_id: Project identifier
            password: Candidate password as supplied by the client
            now: Evaluation time (defaults to current UTC time)

        Returns:
            AccessGrant for the project

        Raises:
            InvalidPasswordFormatError: Password is malformed (no lookup made)
            NotFoundError: Unknown project
            GoneError: Project deleted or expired
            UnauthorizedError: Password does not match
            DependencyError: Metadata store failed
        """
        trail = [AccessState.PENDING]

        candidate = SharePassword(password)
        trail.append(AccessState.PASSWORD_FORMAT_CHECKED)

        try:
            project = self.repository.get_project(project_id)
        except Exception as e:
            logger.error(f"Project lookup failed for {project_id}: {e}", exc_info=True)
            raise DependencyError(f"Project lookup failed: {e}", original_error=e) from e

        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        trail.append(AccessState.PROJECT_FOUND)

        if project.is_deleted:
            raise GoneError(
                f"Project {project_id} was deleted", category=ErrorCategory.PROJECT_DELETED
            )
        trail.append(AccessState.NOT_DELETED)

        if project.is_expired(now or utc_now()):
            raise GoneError(
                f"Project {project_id} expired at {project.expires_at.isoformat()}",
                category=ErrorCategory.PROJECT_EXPIRED,
            )
        trail.append(AccessState.NOT_EXPIRED)

        if not self.password_hasher.verify(project.password_hash, candidate):
            raise UnauthorizedError(f"Wrong password for project {project_id}")
        trail.append(AccessState.PASSWORD_MATCHED)

        trail.append(AccessState.GRANTED)
        return AccessGrant(project=project, trail=trail)

    def find_file(self, grant: AccessGrant, file_name: str) -> SharedFile:
        """
        Look up a file inside a granted project.

        Raises:
            NotFoundError: The project has no file with that name
            DependencyError: Metadata store failed
        """
        project_id = grant.project.project_id
        try:
            shared_file = self.repository.get_file(project_id, file_name)
        except Exception as e:
            raise DependencyError(f"File lookup failed: {e}", original_error=e) from e

        if shared_file is None:
            raise NotFoundError(
                f"File {file_name!r} not found in project {project_id}",
                category=ErrorCategory.FILE_NOT_FOUND,
            )
        return shared_file

    def list_files(self, grant: AccessGrant) -> List[SharedFile]:
        """List the files of a granted project."""
        try:
            return self.repository.list_files(grant.project.project_id)
        except Exception as e:
            raise DependencyError(f"File listing failed: {e}", original_error=e) from e
