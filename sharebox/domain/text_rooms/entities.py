"""
Text Room Entities

A text room is one shared, mutable text buffer. Writes are last-write-wins.
"""

import re
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..errors import ErrorCategory, ValidationError

ROOM_ID_ALPHABET = string.ascii_lowercase


def is_valid_room_id(room_id: Optional[str], length: int) -> bool:
    if not room_id or not isinstance(room_id, str):
        return False
    return re.fullmatch(f"[a-z]{{{length}}}", room_id) is not None


def generate_room_id(length: int) -> str:
    return "".join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(length))


def validate_room_id(room_id: Optional[str], length: int) -> str:
    """
    Raises:
        ValidationError: If the id is not ``length`` lowercase letters
    """
    if not is_valid_room_id(room_id, length):
        raise ValidationError(
            f"Room id must be {length} lowercase letters", category=ErrorCategory.INVALID_REQUEST
        )
    return room_id


@dataclass
class TextRoom:
    """Entity holding the current text of a room."""
    room_id: str
    content: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(cls, room_id: str, now: Optional[datetime] = None) -> "TextRoom":
        now = now or datetime.now(timezone.utc)
        return cls(room_id=room_id, content="", created_at=now, updated_at=now)

    def replace_content(self, content: str, now: Optional[datetime] = None) -> None:
        """Overwrite the text; the most recent write always wins."""
        self.content = content
        self.updated_at = now or datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_id": self.room_id,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextRoom":
        return cls(
            room_id=data["room_id"],
            content=data.get("content", ""),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
