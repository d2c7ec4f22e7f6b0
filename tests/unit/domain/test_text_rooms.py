"""
Unit tests for text room entities and id rules.
"""

from datetime import timedelta

import pytest

from sharebox.domain.errors import ValidationError
from sharebox.domain.text_rooms.entities import (
    TextRoom,
    generate_room_id,
    is_valid_room_id,
    validate_room_id,
)
from tests.fixtures import FIXED_NOW


class TestRoomIds:
    """Test room id generation and validation."""

    @pytest.mark.parametrize(
        "room_id,valid",
        [("abcd", True), ("abc", False), ("abcde", False), ("ABCD", False), ("ab1d", False),
         ("", False), (None, False)],
    )
    def test_validity(self, room_id, valid):
        assert is_valid_room_id(room_id, 4) is valid

    def test_generated_ids_are_valid(self):
        for _ in range(100):
            assert is_valid_room_id(generate_room_id(4), 4)

    def test_validate_raises(self):
        with pytest.raises(ValidationError):
            validate_room_id("AB", 4)


class TestTextRoom:
    """Test room content replacement."""

    def test_new_room_is_empty(self):
        room = TextRoom.create("abcd", now=FIXED_NOW)

        assert room.content == ""
        assert room.created_at == room.updated_at == FIXED_NOW

    def test_last_write_wins(self):
        room = TextRoom.create("abcd", now=FIXED_NOW)
        later = FIXED_NOW + timedelta(minutes=1)

        room.replace_content("first", now=FIXED_NOW)
        room.replace_content("second", now=later)

        assert room.content == "second"
        assert room.updated_at == later
        assert room.created_at == FIXED_NOW

    def test_serialization(self):
        room = TextRoom.create("abcd", now=FIXED_NOW)
        room.replace_content("hello", now=FIXED_NOW)

        assert TextRoom.from_dict(room.to_dict()) == room
