"""
Application Layer

Use-case services orchestrating the domain and infrastructure.
"""

from .access_service import DownloadDescriptor, ShareAccessService
from .dependency_container import DependencyContainer, DependencyNotFoundError
from .event_publisher import EventPublisher
from .reaper_service import CleanupReport, ExpiryReaper
from .text_room_service import TextRoomService
from .upload_service import ReservationResult, UploadCoordinator, UploadResult

__all__ = [
    "CleanupReport",
    "DependencyContainer",
    "DependencyNotFoundError",
    "DownloadDescriptor",
    "EventPublisher",
    "ExpiryReaper",
    "ReservationResult",
    "ShareAccessService",
    "TextRoomService",
    "UploadCoordinator",
    "UploadResult",
]
