"""
Sharing Entities

Domain entities for shared projects, their files and the access audit log.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .value_objects import StorageKey


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Project:
    """
    Entity representing a password-protected, time-limited bundle of files.

    Deletion is tracked as two separate facts: ``deleted_at`` marks the
    project as no longer servable, ``reclaimed_bytes`` counts the blob bytes
    that were actually removed from storage.
    """
    project_id: str
    name: str
    password_hash: str
    created_at: datetime
    expires_at: datetime
    total_size: int
    deleted_at: Optional[datetime] = None
    reclaimed_bytes: int = 0

    @classmethod
    def create(
        cls,
        name: str,
        password_hash: str,
        total_size: int,
        retention: timedelta,
        now: Optional[datetime] = None,
    ) -> "Project":
        """
        Factory method to create a new project.

        Args:
            name: Display name
            password_hash: Hashed share password
            total_size: Sum of declared file sizes in bytes
            retention: How long the project stays accessible
            now: Creation time (defaults to current UTC time)

        Returns:
            New Project instance

        Raises:
            ValueError: If the retention window is not positive
        """
        if retention <= timedelta(0):
            raise ValueError("Retention window must be positive")
        now = now or utc_now()
        return cls(
            project_id=str(uuid.uuid4()),
            name=name,
            password_hash=password_hash,
            created_at=now,
            expires_at=now + retention,
            total_size=total_size,
        )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_purged(self) -> bool:
        """True once every declared byte has been reclaimed from storage."""
        return self.is_deleted and self.reclaimed_bytes >= self.total_size

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check if the project has expired.

        The expiry instant itself is still valid; only later times are expired.
        """
        return (now or utc_now()) > self.expires_at

    def mark_deleted(self, deleted_at: datetime, reclaimed_bytes: int = 0) -> bool:
        """
        Set the deletion mark.

        Returns:
            False if the project was already deleted (no change made)
        """
        if self.is_deleted:
            return False
        self.deleted_at = deleted_at
        self.reclaimed_bytes += max(0, reclaimed_bytes)
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage."""
        return {
            "project_id": self.project_id,
            "name": self.name,
            "password_hash": self.password_hash,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "total_size": self.total_size,
            "is_deleted": self.is_deleted,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
            "reclaimed_bytes": self.reclaimed_bytes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        """Deserialize from storage."""
        return cls(
            project_id=data["project_id"],
            name=data["name"],
            password_hash=data["password_hash"],
            created_at=_parse_datetime(data["created_at"]),
            expires_at=_parse_datetime(data["expires_at"]),
            total_size=int(data.get("total_size", 0)),
            deleted_at=_parse_datetime(data.get("deleted_at")),
            reclaimed_bytes=int(data.get("reclaimed_bytes", 0)),
        )


@dataclass
class SharedFile:
    """
    Entity representing one file of a project.

    Never mutated after creation.
    """
    file_id: str
    project_id: str
    name: str
    size: int
    content_type: str
    storage_key: str
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create(
        cls,
        project_id: str,
        name: str,
        size: int,
        content_type: str,
        now: Optional[datetime] = None,
    ) -> "SharedFile":
        """Create a file row with its deterministic storage key."""
        return cls(
            file_id=str(uuid.uuid4()),
            project_id=project_id,
            name=name,
            size=size,
            content_type=content_type or "application/octet-stream",
            storage_key=StorageKey(project_id, name).value,
            created_at=now or utc_now(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_id": self.file_id,
            "project_id": self.project_id,
            "name": self.name,
            "size": self.size,
            "content_type": self.content_type,
            "storage_key": self.storage_key,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SharedFile":
        return cls(
            file_id=data["file_id"],
            project_id=data["project_id"],
            name=data["name"],
            size=int(data["size"]),
            content_type=data.get("content_type") or "application/octet-stream",
            storage_key=data["storage_key"],
            created_at=_parse_datetime(data.get("created_at")) or utc_now(),
        )


@dataclass
class AccessLogEntry:
    """Append-only audit record of a successful authenticated access."""
    project_id: str
    accessed_at: datetime
    client_ip: str
    user_agent: str
    action: str = "list"
    file_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "accessed_at": self.accessed_at.isoformat(),
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
            "action": self.action,
            "file_name": self.file_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccessLogEntry":
        return cls(
            project_id=data["project_id"],
            accessed_at=_parse_datetime(data["accessed_at"]),
            client_ip=data.get("client_ip", "unknown"),
            user_agent=data.get("user_agent", ""),
            action=data.get("action", "list"),
            file_name=data.get("file_name"),
        )


@dataclass
class ExpiredProject:
    """A project due for reaping together with its files."""
    project: Project
    files: List[SharedFile]

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.files)
