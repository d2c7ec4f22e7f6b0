"""
Text Rooms Domain
"""

from .entities import TextRoom, generate_room_id, is_valid_room_id, validate_room_id
from .repositories import ITextRoomRepository

__all__ = [
    "ITextRoomRepository",
    "TextRoom",
    "generate_room_id",
    "is_valid_room_id",
    "validate_room_id",
]
