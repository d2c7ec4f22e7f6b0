"""
Unit tests for TextRoomService.
"""

from datetime import timedelta

import pytest

from sharebox.application import text_room_service as module
from sharebox.application.text_room_service import TextRoomService
from sharebox.domain.errors import DependencyError, ErrorCategory, NotFoundError, ValidationError
from sharebox.domain.events import TextRoomUpdatedEvent
from sharebox.domain.text_rooms.entities import TextRoom, is_valid_room_id
from tests.fixtures import FIXED_NOW


class TestCreateRoom:
    """Test room creation."""

    def test_creates_empty_room(self, text_room_service, room_repository):
        room = text_room_service.create_room(now=FIXED_NOW)

        assert is_valid_room_id(room.room_id, 4)
        assert room.content == ""
        assert room.created_at == room.updated_at == FIXED_NOW
        assert room_repository.ttls[room.room_id] == 24 * 3600

    def test_retries_on_collision(self, text_room_service, room_repository, monkeypatch):
        room_repository.add(TextRoom.create("aaaa", FIXED_NOW))
        ids = iter(["aaaa", "aaaa", "bbbb"])
        monkeypatch.setattr(module, "generate_room_id", lambda length: next(ids))

        room = text_room_service.create_room()

        assert room.room_id == "bbbb"
        assert len(room_repository.calls_to("create")) == 3

    def test_gives_up_after_max_attempts(self, room_repository, monkeypatch):
        room_repository.add(TextRoom.create("aaaa", FIXED_NOW))
        monkeypatch.setattr(module, "generate_room_id", lambda length: "aaaa")
        service = TextRoomService(room_repository, max_create_attempts=3)

        with pytest.raises(DependencyError) as exc_info:
            service.create_room()

        assert exc_info.value.category == ErrorCategory.SERVICE_UNAVAILABLE
        assert len(room_repository.calls_to("create")) == 3

    def test_store_failure(self, text_room_service, room_repository):
        room_repository.fail_on("create", ConnectionError("redis down"))

        with pytest.raises(DependencyError):
            text_room_service.create_room()


class TestGetRoom:
    """Test room lookup."""

    def test_get_existing_room(self, text_room_service, room_repository):
        room_repository.add(TextRoom.create("abcd", FIXED_NOW))

        assert text_room_service.get_room("abcd").room_id == "abcd"

    def test_malformed_id_is_not_looked_up(self, text_room_service, room_repository):
        with pytest.raises(ValidationError):
            text_room_service.get_room("AB12")

        assert room_repository.calls_to("get") == []

    def test_unknown_room(self, text_room_service):
        with pytest.raises(NotFoundError) as exc_info:
            text_room_service.get_room("zzzz")

        assert exc_info.value.category == ErrorCategory.ROOM_NOT_FOUND


class TestUpdateContent:
    """Test last-write-wins updates."""

    def test_last_write_wins(self, text_room_service, room_repository, event_publisher):
        room_repository.add(TextRoom.create("abcd", FIXED_NOW))

        text_room_service.update_content("abcd", "first", now=FIXED_NOW + timedelta(seconds=1))
        room = text_room_service.update_content("abcd", "second",
                                                now=FIXED_NOW + timedelta(seconds=2))

        assert room.content == "second"
        assert text_room_service.get_room("abcd").content == "second"
        assert room.updated_at == FIXED_NOW + timedelta(seconds=2)
        events = [e for e in event_publisher.published if isinstance(e, TextRoomUpdatedEvent)]
        assert [e.content_length for e in events] == [5, 6]

    def test_update_refreshes_ttl(self, room_repository):
        room_repository.add(TextRoom.create("abcd", FIXED_NOW))
        service = TextRoomService(room_repository, ttl_seconds=60)

        service.update_content("abcd", "hi")

        assert room_repository.ttls["abcd"] == 60

    def test_oversized_content(self, room_repository):
        room_repository.add(TextRoom.create("abcd", FIXED_NOW))
        service = TextRoomService(room_repository, max_content_length=3)

        with pytest.raises(ValidationError):
            service.update_content("abcd", "four")

        assert room_repository.calls_to("save") == []

    def test_non_string_content(self, text_room_service):
        with pytest.raises(ValidationError):
            text_room_service.update_content("abcd", 42)

    def test_unknown_room(self, text_room_service):
        with pytest.raises(NotFoundError):
            text_room_service.update_content("abcd", "text")

    def test_save_failure(self, text_room_service, room_repository):
        room_repository.add(TextRoom.create("abcd", FIXED_NOW))
        room_repository.fail_on("save", False)

        with pytest.raises(DependencyError):
            text_room_service.update_content("abcd", "text")
