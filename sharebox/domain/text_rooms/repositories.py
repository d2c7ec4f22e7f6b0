"""
Text Room Repositories

Repository interface for text room persistence.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .entities import TextRoom


class ITextRoomRepository(ABC):
    """Abstract repository interface for text rooms."""

    @abstractmethod
    def create(self, room: TextRoom, ttl_seconds: int) -> bool:
        """
        Store a new room unless the id is already taken.

        Returns:
            True if stored, False if the id exists or the write failed
        """
        ...

    @abstractmethod
    def get(self, room_id: str) -> Optional[TextRoom]:
        ...

    @abstractmethod
    def save(self, room: TextRoom, ttl_seconds: int) -> bool:
        """Overwrite a room and refresh its time to live."""
        ...
