"""
Upload Application Service

Coordinates an upload batch: validation, metadata registration, blob
transfer and compensating rollback.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from sharebox.domain.errors import (
    ConflictError,
    DependencyError,
    ErrorCategory,
    FileViolation,
    GoneError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from sharebox.domain.events import ProjectCreatedEvent, UploadRolledBackEvent
from sharebox.domain.file_storage.blob_store import BlobStoreError, IBlobStore
from sharebox.domain.sharing.entities import Project, SharedFile, utc_now
from sharebox.domain.sharing.policy import SecurityPolicy
from sharebox.domain.sharing.repositories import ProjectRepository
from sharebox.domain.sharing.sanitizer import deduplicate_names, sanitize_filename
from sharebox.domain.sharing.services import IPasswordHasher
from sharebox.domain.sharing.value_objects import SharePassword, UploadItem

from .descriptors import DEFAULT_DOWNLOAD_BASE, describe_file

logger = logging.getLogger(__name__)

MAX_PROJECT_NAME_LENGTH = 200


@dataclass
class ValidatedFile:
    """An upload item that passed the policy, with its sanitized name."""
    item: UploadItem
    name: str


@dataclass
class UploadResult:
    """
    Outcome of a completed upload.

    ``password`` holds the plaintext only in the response to the request
    that created the project. It is None everywhere else.
    """
    project: Project
    files: List[SharedFile]
    password: Optional[SharePassword] = None
    download_base: str = DEFAULT_DOWNLOAD_BASE

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "projectId": self.project.project_id,
            "projectName": self.project.name,
            "expiresAt": self.project.expires_at.isoformat(),
            "files": [describe_file(f, self.download_base) for f in self.files],
        }
        if self.password is not None:
            data["password"] = self.password.value
        return data


@dataclass
class ReservationResult:
    """Outcome of the first phase of a direct-to-storage upload."""
    project: Project
    password: SharePassword
    uploads: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectId": self.project.project_id,
            "projectName": self.project.name,
            "password": self.password.value,
            "expiresAt": self.project.expires_at.isoformat(),
            "uploads": list(self.uploads),
        }


def default_project_name(now: datetime) -> str:
    return now.strftime("share_%Y-%m-%d_%H-%M")


class UploadCoordinator:
    """
    Application service for creating shared projects.

    Validation happens before any mutation. Once the project row exists,
    any failure deletes the project, its file rows and the blobs already
    written for the batch before the error reaches the caller.
    """

    def __init__(
        self,
        repository: ProjectRepository,
        blob_store: IBlobStore,
        password_hasher: IPasswordHasher,
        policy: SecurityPolicy,
        retention: timedelta,
        event_publisher=None,
        upload_url_ttl: int = 3600,
        download_base: str = DEFAULT_DOWNLOAD_BASE,
    ):
        """
        Initialize UploadCoordinator.

        Args:
            repository: Project metadata repository
            blob_store: Binary storage
            password_hasher: Hashes generated passwords
            policy: File type, size and count limits
            retention: How long a project stays accessible
            event_publisher: Optional EventPublisher for domain events
            upload_url_ttl: Lifetime of signed upload URLs in seconds
            download_base: Path prefix for file download descriptors
        """
        self.repository = repository
        self.blob_store = blob_store
        self.password_hasher = password_hasher
        self.policy = policy
        self.retention = retention
        self.event_publisher = event_publisher
        self.upload_url_ttl = upload_url_ttl
        self.download_base = download_base

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, items: Sequence[UploadItem]) -> List[ValidatedFile]:
        """
        Check a batch against the security policy.

        Every file is checked so the error lists all offending files.

        Returns:
            Validated files with unique sanitized names, in input order

        Raises:
            ValidationError: If the batch is empty, too large, or any file
                is rejected
        """
        if not items:
            raise ValidationError("No files were provided", category=ErrorCategory.NO_FILES)
        if not self.policy.is_file_count_allowed(len(items)):
            raise ValidationError(
                f"{len(items)} files exceed the limit of {self.policy.max_files}",
                category=ErrorCategory.TOO_MANY_FILES,
            )

        violations: List[FileViolation] = []
        running_total = 0
        for item in items:
            if not self.policy.is_file_size_allowed(item.size):
                violations.append(FileViolation(
                    item.filename,
                    ErrorCategory.FILE_TOO_LARGE,
                    f"size {item.size} is outside 1..{self.policy.max_file_size} bytes",
                ))
            if not self.policy.is_file_allowed(item.filename, item.content_type):
                violations.append(FileViolation(
                    item.filename,
                    ErrorCategory.FILE_TYPE_BLOCKED,
                    f"type {item.content_type!r} or its extension is not allowed",
                ))
            if not self.policy.is_project_size_allowed(running_total, item.size):
                violations.append(FileViolation(
                    item.filename,
                    ErrorCategory.PROJECT_TOO_LARGE,
                    f"project total would exceed {self.policy.max_project_size} bytes",
                ))
            running_total += max(item.size, 0)

        if violations:
            raise ValidationError(
                f"{len(violations)} problem(s) in upload batch: {violations!r}",
                violations=violations,
                category=violations[0].category,
            )

        names = deduplicate_names([sanitize_filename(item.filename) for item in items])
        return [ValidatedFile(item=item, name=name) for item, name in zip(items, names)]

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    def upload(
        self,
        items: Sequence[UploadItem],
        project_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> UploadResult:
        """
        Create a project and store every file's bytes server-side.

        Raises:
            ValidationError: Batch rejected; nothing was written
            DependencyError: Storage failed; everything was rolled back
        """
        validated = self.validate(items)
        password, project, files = self._build_project(validated, project_name, now)

        self._register(project, files)

        attempted: List[str] = []
        try:
            for entry, shared_file in zip(validated, files):
                attempted.append(shared_file.storage_key)
                if not self.blob_store.put(
                    shared_file.storage_key, entry.item.read_bytes(), shared_file.content_type
                ):
                    raise BlobStoreError(f"Blob store rejected {shared_file.storage_key}")
        except Exception as e:
            self.rollback(project.project_id, attempted, stage="blob_transfer", reason=str(e))
            raise DependencyError(
                f"Blob transfer failed for project {project.project_id}: {e}",
                original_error=e,
            ) from e

        logger.info(
            f"Project {project.project_id} created with {len(files)} file(s), "
            f"{project.total_size} bytes"
        )
        self._publish_created(project, files)
        return UploadResult(project=project, files=files, password=password,
                            download_base=self.download_base)

    def reserve(
        self,
        items: Sequence[UploadItem],
        project_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ReservationResult:
        """
        Register a project and hand out signed upload URLs.

        The client uploads each file directly to storage and then calls
        ``complete``.

        Raises:
            ValidationError: Batch rejected; nothing was written
            DependencyError: Registration or signing failed; rolled back
        """
        validated = self.validate(items)
        password, project, files = self._build_project(validated, project_name, now)

        self._register(project, files)

        uploads = []
        try:
            for shared_file in files:
                uploads.append({
                    "name": shared_file.name,
                    "storageKey": shared_file.storage_key,
                    "uploadUrl": self.blob_store.sign_upload(
                        shared_file.storage_key, self.upload_url_ttl, shared_file.content_type
                    ),
                    "headers": self.blob_store.upload_headers(shared_file.content_type),
                })
        except Exception as e:
            self.rollback(project.project_id, [], stage="sign_upload", reason=str(e))
            raise DependencyError(
                f"Signing upload URLs failed for project {project.project_id}: {e}",
                original_error=e,
            ) from e

        logger.info(f"Project {project.project_id} reserved for {len(files)} direct upload(s)")
        return ReservationResult(project=project, password=password, uploads=uploads)

    def complete(self, project_id: str, password: Optional[str]) -> UploadResult:
        """
        Finish a direct upload by checking that every blob arrived.

        Raises:
            InvalidPasswordFormatError: Malformed password
            NotFoundError: Unknown project
            GoneError: Project already deleted
            UnauthorizedError: Wrong password
            DependencyError: Blobs missing or storage failed; rolled back
        """
        candidate = SharePassword(password)
        try:
            project = self.repository.get_project(project_id)
        except Exception as e:
            raise DependencyError(f"Project lookup failed: {e}", original_error=e) from e

        if project is None:
            raise NotFoundError(f"Project {project_id} not found")
        if project.is_deleted:
            raise GoneError(f"Project {project_id} was deleted",
                            category=ErrorCategory.PROJECT_DELETED)
        if not self.password_hasher.verify(project.password_hash, candidate):
            raise UnauthorizedError(f"Wrong password for project {project_id}")

        try:
            files = self.repository.list_files(project_id)
        except Exception as e:
            raise DependencyError(f"File listing failed: {e}", original_error=e) from e

        # Storage errors leave the project in place
        try:
            stored_sizes = {f.storage_key: self.blob_store.size(f.storage_key) for f in files}
        except Exception as e:
            raise DependencyError(
                f"Could not verify blobs of project {project_id}: {e}", original_error=e
            ) from e

        all_keys = [f.storage_key for f in files]
        missing = [key for key, size in stored_sizes.items() if size is None]
        if missing or not files:
            reason = f"missing blobs: {missing}" if missing else "no files registered"
            self.rollback(project_id, all_keys, stage="complete", reason=reason)
            raise DependencyError(
                f"Direct upload for project {project_id} incomplete ({reason})",
                category=ErrorCategory.UPLOAD_INCOMPLETE,
            )

        violations = [
            FileViolation(
                f.name,
                ErrorCategory.UPLOAD_SIZE_MISMATCH,
                f"declared {f.size} bytes, stored {stored_sizes[f.storage_key]} bytes",
            )
            for f in files
            if stored_sizes[f.storage_key] != f.size
        ]
        if violations:
            self.rollback(project_id, all_keys, stage="complete",
                          reason=f"size mismatch: {violations!r}")
            raise ValidationError(
                f"Direct upload for project {project_id} does not match its declared sizes",
                violations=violations,
                category=ErrorCategory.UPLOAD_SIZE_MISMATCH,
            )

        logger.info(f"Project {project_id} completed with {len(files)} file(s)")
        self._publish_created(project, files)
        return UploadResult(project=project, files=files, download_base=self.download_base)

    def authorize_direct_put(self, storage_key: str, size: int) -> SharedFile:
        """
        Check a PUT to a signed upload URL before its body is stored.

        Each reserved key takes exactly one blob of its declared size.

        Returns:
            The reserved file row

        Raises:
            NotFoundError: No file was reserved at the key
            GoneError: The project is deleted or expired
            ValidationError: The body size differs from the declared size
            ConflictError: A blob is already stored at the key
            DependencyError: Metadata or blob store failed
        """
        project_id, _, name = storage_key.partition("/")
        try:
            project = self.repository.get_project(project_id) if name else None
            shared_file = self.repository.get_file(project_id, name) if project else None
            already_stored = self.blob_store.exists(storage_key) if shared_file else False
        except Exception as e:
            raise DependencyError(
                f"Upload check for {storage_key} failed: {e}", original_error=e
            ) from e

        if project is None:
            raise NotFoundError(f"No project reserved for {storage_key}")
        if project.is_deleted:
            raise GoneError(f"Project {project_id} was deleted",
                            category=ErrorCategory.PROJECT_DELETED)
        if project.is_expired(utc_now()):
            raise GoneError(f"Project {project_id} expired")
        if shared_file is None:
            raise NotFoundError(f"No file reserved at {storage_key}",
                                category=ErrorCategory.FILE_NOT_FOUND)
        if size != shared_file.size:
            raise ValidationError(
                f"Body of {size} bytes for {storage_key}, declared {shared_file.size}",
                violations=[FileViolation(
                    shared_file.name,
                    ErrorCategory.UPLOAD_SIZE_MISMATCH,
                    f"declared {shared_file.size} bytes, sent {size} bytes",
                )],
                category=ErrorCategory.UPLOAD_SIZE_MISMATCH,
            )
        if already_stored:
            raise ConflictError(f"Blob {storage_key} is already stored")
        return shared_file

    # ------------------------------------------------------------------
    # Compensation
    # ------------------------------------------------------------------

    def rollback(self, project_id: str, storage_keys: List[str], stage: str, reason: str) -> bool:
        """
        Undo a partial upload.

        Blob deletion is best-effort. The project row and its file rows are
        hard-deleted.

        Returns:
            True if the metadata was removed
        """
        logger.warning(f"Rolling back project {project_id} at {stage}: {reason}")

        if storage_keys:
            try:
                results = self.blob_store.delete(storage_keys)
                leftover = [key for key, ok in results.items() if not ok]
                if leftover:
                    logger.warning(f"Rollback left {len(leftover)} blob(s) behind: {leftover}")
            except Exception as e:
                logger.warning(f"Rollback blob cleanup failed for {project_id}: {e}", exc_info=True)

        try:
            removed = self.repository.delete_project(project_id)
        except Exception as e:
            logger.error(f"Rollback could not delete project {project_id}: {e}", exc_info=True)
            removed = False

        if self.event_publisher:
            self.event_publisher.publish(UploadRolledBackEvent(
                aggregate_id=project_id,
                occurred_at=utc_now(),
                stage=stage,
                reason=reason,
            ))
        return removed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _build_project(
        self, validated: List[ValidatedFile], project_name: Optional[str], now: Optional[datetime]
    ):
        now = now or utc_now()
        name = (project_name or "").strip()[:MAX_PROJECT_NAME_LENGTH] or default_project_name(now)

        password = SharePassword.generate()
        project = Project.create(
            name=name,
            password_hash=self.password_hasher.hash(password),
            total_size=sum(entry.item.size for entry in validated),
            retention=self.retention,
            now=now,
        )
        files = [
            SharedFile.create(
                project_id=project.project_id,
                name=entry.name,
                size=entry.item.size,
                content_type=entry.item.content_type,
                now=now,
            )
            for entry in validated
        ]
        return password, project, files

    def _register(self, project: Project, files: List[SharedFile]) -> None:
        """
        Write the project row, then the file rows.

        Raises:
            DependencyError: Either write failed; the project was rolled back
        """
        stage = "register_project"
        try:
            if not self.repository.create_project(project):
                raise DependencyError("Project row was not written")
            stage = "register_files"
            if not self.repository.create_files(files):
                raise DependencyError("File rows were not written")
        except Exception as e:
            self.rollback(project.project_id, [], stage=stage, reason=str(e))
            raise DependencyError(
                f"Metadata registration failed for project {project.project_id}: {e}",
                original_error=e,
            ) from e

    def _publish_created(self, project: Project, files: List[SharedFile]) -> None:
        if self.event_publisher:
            self.event_publisher.publish(ProjectCreatedEvent(
                aggregate_id=project.project_id,
                occurred_at=utc_now(),
                file_count=len(files),
                total_size=project.total_size,
                expires_at=project.expires_at,
            ))
