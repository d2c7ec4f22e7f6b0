"""
Unit tests for the text room WebSocket events.
"""

from unittest.mock import Mock, patch

import pytest
from flask import Flask
from flask_socketio import SocketIO

from sharebox.api import websocket_events
from sharebox.api.websocket_events import emit_text_updated, register_socketio_events, room_payload
from sharebox.domain.text_rooms.entities import TextRoom
from tests.fixtures import FIXED_NOW


def _room(content="hello"):
    room = TextRoom.create("abcd", FIXED_NOW)
    room.replace_content(content, FIXED_NOW)
    return room


def _events(client, name):
    return [e["args"][0] for e in client.get_received() if e["name"] == name]


@pytest.fixture
def socket_app(text_room_service, room_repository):
    """Flask app with an in-process SocketIO server and the room handlers."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.text_room_service = text_room_service
    socketio = SocketIO(app, async_mode="threading")

    room_repository.add(_room("initial"))
    with patch.object(websocket_events, "get_socketio", return_value=socketio):
        register_socketio_events(app)
    return app, socketio


class TestRoomPayload:
    """Test the wire shape."""

    def test_payload(self):
        assert room_payload(_room()) == {
            "room_id": "abcd",
            "content": "hello",
            "updated_at": FIXED_NOW.isoformat(),
        }


class TestEmitTextUpdated:
    """Test broadcasts triggered by the HTTP API."""

    @patch("sharebox.api.websocket_events.get_socketio", return_value=None)
    def test_without_socketio(self, _mock_get):
        assert emit_text_updated(_room()) is False

    @patch("sharebox.api.websocket_events.get_socketio")
    def test_emits_to_room(self, mock_get):
        socketio = Mock()
        mock_get.return_value = socketio

        assert emit_text_updated(_room()) is True

        socketio.emit.assert_called_once_with("text_updated", room_payload(_room()), to="abcd")

    @patch("sharebox.api.websocket_events.get_socketio")
    def test_emit_failure(self, mock_get):
        mock_get.return_value = Mock(emit=Mock(side_effect=ConnectionError("queue down")))

        assert emit_text_updated(_room()) is False

    @patch("sharebox.api.websocket_events.get_socketio", return_value=None)
    def test_registration_skipped_without_socketio(self, _mock_get):
        register_socketio_events(Flask(__name__))


class TestSocketHandlers:
    """Test the room handlers through the SocketIO test client."""

    def test_connect_greets_client(self, socket_app):
        app, socketio = socket_app
        client = socketio.test_client(app)

        [greeting] = _events(client, "connected")
        assert "client_id" in greeting

    def test_join_sends_room_state(self, socket_app):
        app, socketio = socket_app
        client = socketio.test_client(app)
        client.get_received()

        client.emit("join_room", {"room_id": "abcd"})

        [state] = _events(client, "room_state")
        assert (state["room_id"], state["content"]) == ("abcd", "initial")

    @pytest.mark.parametrize("data", [{}, {"room_id": "zzzz"}, {"room_id": "AB12"}])
    def test_join_errors(self, socket_app, data):
        app, socketio = socket_app
        client = socketio.test_client(app)
        client.get_received()

        client.emit("join_room", data)

        assert len(_events(client, "error")) == 1

    def test_update_reaches_other_members(self, socket_app, room_repository):
        app, socketio = socket_app
        writer = socketio.test_client(app)
        reader = socketio.test_client(app)
        for client in (writer, reader):
            client.emit("join_room", {"room_id": "abcd"})
            client.get_received()

        writer.emit("update_text", {"room_id": "abcd", "content": "changed"})

        [update] = _events(reader, "text_updated")
        assert update["content"] == "changed"
        assert _events(writer, "text_updated") == []
        assert room_repository.get("abcd").content == "changed"

    def test_update_without_content(self, socket_app):
        app, socketio = socket_app
        client = socketio.test_client(app)
        client.get_received()

        client.emit("update_text", {"room_id": "abcd"})

        assert len(_events(client, "error")) == 1

    def test_leave_room(self, socket_app):
        app, socketio = socket_app
        client = socketio.test_client(app)
        client.emit("join_room", {"room_id": "abcd"})
        client.get_received()

        client.emit("leave_room", {"room_id": "abcd"})

        assert _events(client, "left_room") == [{"room_id": "abcd"}]
