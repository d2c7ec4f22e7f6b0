"""
Redis Text Room Repository

Stores each text room as a single JSON row with a time to live.
"""

from typing import Optional

from sharebox.domain.text_rooms.entities import TextRoom
from sharebox.domain.text_rooms.repositories import ITextRoomRepository

from .redis_repository import RedisRepository


class RedisTextRoomRepository(ITextRoomRepository):
    """Redis implementation of ITextRoomRepository."""

    def __init__(self, redis_repo: RedisRepository):
        self.redis_repo = redis_repo

    @staticmethod
    def _key(room_id: str) -> str:
        return f"room:{room_id}"

    def create(self, room: TextRoom, ttl_seconds: int) -> bool:
        return self.redis_repo.set_json(
            self._key(room.room_id), room.to_dict(), ttl=ttl_seconds, only_if_absent=True
        )

    def get(self, room_id: str) -> Optional[TextRoom]:
        data = self.redis_repo.get_json(self._key(room_id))
        if data is None:
            return None
        return TextRoom.from_dict(data)

    def save(self, room: TextRoom, ttl_seconds: int) -> bool:
        return self.redis_repo.set_json(self._key(room.room_id), room.to_dict(), ttl=ttl_seconds)
