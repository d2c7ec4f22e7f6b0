"""
Share Access Application Service

Wraps the access gate with attempt limiting, download descriptors and
the access audit log.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from sharebox.domain.attempt_limiting.services import AttemptPolicy, NoAttemptLimit
from sharebox.domain.errors import ErrorCategory, NotFoundError, UnauthorizedError, ValidationError
from sharebox.domain.events import ProjectAccessedEvent
from sharebox.domain.file_storage.blob_store import IBlobStore
from sharebox.domain.sharing.entities import AccessLogEntry, SharedFile, utc_now
from sharebox.domain.sharing.repositories import ProjectRepository
from sharebox.domain.sharing.services import AccessGate, AccessGrant

from .descriptors import DEFAULT_DOWNLOAD_BASE, describe_file

logger = logging.getLogger(__name__)

DOWNLOAD_MODES = ("stream", "redirect")


@dataclass
class DownloadDescriptor:
    """
    What the API needs to answer a download.

    Stream mode carries ``content``; redirect mode carries ``url``.
    """
    file: SharedFile
    mode: str
    content: Optional[bytes] = None
    url: Optional[str] = None


class ShareAccessService:
    """
    Application service for reading shared projects.

    Every read goes through the attempt policy and the access gate. Granted
    reads are appended to the access log on a best-effort basis.
    """

    def __init__(
        self,
        gate: AccessGate,
        repository: ProjectRepository,
        blob_store: IBlobStore,
        attempt_policy: Optional[AttemptPolicy] = None,
        event_publisher=None,
        signed_url_ttl: int = 3600,
        download_base: str = DEFAULT_DOWNLOAD_BASE,
    ):
        self.gate = gate
        self.repository = repository
        self.blob_store = blob_store
        self.attempt_policy = attempt_policy or NoAttemptLimit()
        self.event_publisher = event_publisher
        self.signed_url_ttl = signed_url_ttl
        self.download_base = download_base

    def list_project(
        self,
        project_id: str,
        password: Optional[str],
        client_ip: str = "unknown",
        user_agent: str = "",
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        List a project's files after authenticating.

        Returns:
            Dictionary with projectId, projectName, createdAt, expiresAt,
            totalSize and files

        Raises:
            TooManyAttemptsError, ValidationError, NotFoundError, GoneError,
            UnauthorizedError, DependencyError
        """
        grant = self._authorize(project_id, password, client_ip, now)
        files = self.gate.list_files(grant)
        self._record_access(grant, "list", client_ip, user_agent)

        project = grant.project
        return {
            "projectId": project.project_id,
            "projectName": project.name,
            "createdAt": project.created_at.isoformat(),
            "expiresAt": project.expires_at.isoformat(),
            "totalSize": project.total_size,
            "files": [describe_file(f, self.download_base) for f in files],
        }

    def get_download(
        self,
        project_id: str,
        file_name: str,
        password: Optional[str],
        mode: str = "stream",
        client_ip: str = "unknown",
        user_agent: str = "",
        now: Optional[datetime] = None,
    ) -> DownloadDescriptor:
        """
        Produce a download for one file after authenticating.

        Args:
            mode: "stream" returns the bytes, "redirect" a signed URL

        Raises:
            ValidationError: Unknown mode or malformed password
            NotFoundError: Unknown project, file or missing blob
            TooManyAttemptsError, GoneError, UnauthorizedError, DependencyError
        """
        if mode not in DOWNLOAD_MODES:
            raise ValidationError(f"Unknown download mode {mode!r}")

        grant = self._authorize(project_id, password, client_ip, now)
        shared_file = self.gate.find_file(grant, file_name)

        if mode == "redirect":
            url = self.blob_store.sign(
                shared_file.storage_key,
                self.signed_url_ttl,
                as_download=True,
                filename=shared_file.name,
            )
            descriptor = DownloadDescriptor(file=shared_file, mode=mode, url=url)
        else:
            content = self.blob_store.get(shared_file.storage_key)
            if content is None:
                logger.error(f"Blob missing for {shared_file.storage_key}")
                raise NotFoundError(
                    f"Blob {shared_file.storage_key} not found",
                    category=ErrorCategory.FILE_NOT_FOUND,
                )
            descriptor = DownloadDescriptor(file=shared_file, mode=mode, content=content)

        self._record_access(grant, "download", client_ip, user_agent, shared_file.name)
        return descriptor

    def _authorize(
        self, project_id: str, password: Optional[str], client_ip: str, now: Optional[datetime]
    ) -> AccessGrant:
        self.attempt_policy.check(project_id, client_ip)
        try:
            grant = self.gate.authorize(project_id, password, now=now)
        except UnauthorizedError:
            state = self.attempt_policy.record_failure(project_id, client_ip)
            if state is not None:
                logger.info(
                    f"Wrong password for project {project_id}, "
                    f"{state.remaining()} attempt(s) left"
                )
            raise
        self.attempt_policy.reset(project_id, client_ip)
        return grant

    def _record_access(
        self,
        grant: AccessGrant,
        action: str,
        client_ip: str,
        user_agent: str,
        file_name: Optional[str] = None,
    ) -> None:
        entry = AccessLogEntry(
            project_id=grant.project.project_id,
            accessed_at=utc_now(),
            client_ip=client_ip,
            user_agent=user_agent or "",
            action=action,
            file_name=file_name,
        )
        try:
            if not self.repository.append_access_log(entry):
                logger.warning(f"Access log entry for {entry.project_id} was not written")
        except Exception as e:
            logger.warning(f"Access log append failed for {entry.project_id}: {e}", exc_info=True)

        if self.event_publisher:
            self.event_publisher.publish(ProjectAccessedEvent(
                aggregate_id=entry.project_id,
                occurred_at=entry.accessed_at,
                action=action,
                file_name=file_name,
            ))
