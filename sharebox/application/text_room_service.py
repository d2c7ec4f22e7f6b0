"""
Text Room Application Service

Creates, reads and updates short-lived shared text rooms.
"""

import logging
from datetime import datetime
from typing import Optional

from sharebox.domain.errors import DependencyError, ErrorCategory, NotFoundError, ValidationError
from sharebox.domain.events import TextRoomUpdatedEvent
from sharebox.domain.text_rooms.entities import TextRoom, generate_room_id, validate_room_id
from sharebox.domain.text_rooms.repositories import ITextRoomRepository

logger = logging.getLogger(__name__)


class TextRoomService:
    """
    Application service for text rooms.

    Updates are last-write-wins and refresh the room's time to live.
    """

    def __init__(
        self,
        repository: ITextRoomRepository,
        id_length: int = 4,
        ttl_seconds: int = 24 * 3600,
        max_content_length: int = 100_000,
        event_publisher=None,
        max_create_attempts: int = 10,
    ):
        self.repository = repository
        self.id_length = id_length
        self.ttl_seconds = ttl_seconds
        self.max_content_length = max_content_length
        self.event_publisher = event_publisher
        self.max_create_attempts = max_create_attempts

    def create_room(self, now: Optional[datetime] = None) -> TextRoom:
        """
        Create an empty room under a fresh id.

        Raises:
            DependencyError: No free id was found or the store failed
        """
        for _ in range(self.max_create_attempts):
            room = TextRoom.create(generate_room_id(self.id_length), now=now)
            try:
                if self.repository.create(room, self.ttl_seconds):
                    logger.info(f"Text room created: {room.room_id}")
                    return room
            except Exception as e:
                raise DependencyError(f"Creating text room failed: {e}", original_error=e) from e

        raise DependencyError(
            f"No free room id after {self.max_create_attempts} attempts",
            category=ErrorCategory.SERVICE_UNAVAILABLE,
        )

    def get_room(self, room_id: str) -> TextRoom:
        """
        Raises:
            ValidationError: Malformed room id
            NotFoundError: Unknown or expired room
            DependencyError: The store failed
        """
        validate_room_id(room_id, self.id_length)
        try:
            room = self.repository.get(room_id)
        except Exception as e:
            raise DependencyError(f"Loading text room failed: {e}", original_error=e) from e

        if room is None:
            raise NotFoundError(f"Room {room_id} not found", category=ErrorCategory.ROOM_NOT_FOUND)
        return room

    def update_content(self, room_id: str, content: str, now: Optional[datetime] = None) -> TextRoom:
        """
        Replace a room's text.

        Raises:
            ValidationError: Malformed id, non-string or oversized content
            NotFoundError: Unknown or expired room
            DependencyError: The store failed
        """
        if not isinstance(content, str):
            raise ValidationError("Room content must be a string")
        if len(content) > self.max_content_length:
            raise ValidationError(
                f"Room content exceeds {self.max_content_length} characters"
            )

        room = self.get_room(room_id)
        room.replace_content(content, now=now)

        try:
            saved = self.repository.save(room, self.ttl_seconds)
        except Exception as e:
            raise DependencyError(f"Saving text room failed: {e}", original_error=e) from e
        if not saved:
            raise DependencyError(f"Room {room_id} was not saved")

        if self.event_publisher:
            self.event_publisher.publish(TextRoomUpdatedEvent(
                aggregate_id=room.room_id,
                occurred_at=room.updated_at,
                content_length=len(content),
            ))
        return room
