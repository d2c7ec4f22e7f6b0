"""
Domain Events

Immutable records of significant state changes in the domain.
Events decouple side effects (logging, notifications) from core business logic.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (project or room id)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class ProjectCreatedEvent(DomainEvent):
    """
    Event emitted when an upload completes and the project becomes servable.

    Attributes:
        file_count: Number of files in the project
        total_size: Declared size in bytes
        expires_at: When the project stops being accessible
    """
    file_count: int
    total_size: int
    expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "file_count": self.file_count,
            "total_size": self.total_size,
            "expires_at": self.expires_at.isoformat(),
        })
        return base_dict


@dataclass(frozen=True)
class UploadRolledBackEvent(DomainEvent):
    """Event emitted when a failed upload was compensated."""
    stage: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({"stage": self.stage, "reason": self.reason})
        return base_dict


@dataclass(frozen=True)
class ProjectAccessedEvent(DomainEvent):
    """
    Event emitted when the access gate grants a request.

    Attributes:
        action: "list" or "download"
        file_name: Downloaded file, if any
    """
    action: str
    file_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({"action": self.action, "file_name": self.file_name})
        return base_dict


@dataclass(frozen=True)
class ProjectReapedEvent(DomainEvent):
    """Event emitted when the expiry reaper soft-deletes a project."""
    files_deleted: int
    files_failed: int
    bytes_reclaimed: int

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "files_deleted": self.files_deleted,
            "files_failed": self.files_failed,
            "bytes_reclaimed": self.bytes_reclaimed,
        })
        return base_dict


@dataclass(frozen=True)
class TextRoomUpdatedEvent(DomainEvent):
    """Event emitted when a text room's content is replaced."""
    content_length: int

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({"content_length": self.content_length})
        return base_dict
