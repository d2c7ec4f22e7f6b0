"""
WebSocket Event Handlers

Handles WebSocket connections and events for shared text rooms.
"""

import logging

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from sharebox.config.socketio_config import get_socketio
from sharebox.domain.errors import DomainError

logger = logging.getLogger(__name__)


def room_payload(room) -> dict:
    """Wire shape of a text room."""
    return {
        "room_id": room.room_id,
        "content": room.content,
        "updated_at": room.updated_at.isoformat(),
    }


def register_socketio_events(app):
    """
    Register WebSocket event handlers with the Flask-SocketIO instance.

    Args:
        app: Flask application instance
    """
    socketio = get_socketio()

    if socketio is None:
        logger.warning("SocketIO not initialized, skipping event registration")
        return

    @socketio.on("connect")
    def handle_connect():
        """Handle client connection."""
        client_id = request.sid
        logger.info(f"Client connected: {client_id}")
        emit("connected", {"message": "Connected to server", "client_id": client_id})

    @socketio.on("disconnect")
    def handle_disconnect():
        """Handle client disconnection."""
        logger.info(f"Client disconnected: {request.sid}")

    @socketio.on("join_room")
    def handle_join_room(data):
        """
        Join a text room and receive its current state.

        Args:
            data: dict with 'room_id' field
        """
        room_id = (data or {}).get("room_id")
        if not room_id:
            emit("error", {"message": "Missing room_id"})
            return

        service = getattr(current_app, "text_room_service", None)
        if service is None:
            emit("error", {"message": "Text room service not initialized"})
            return

        try:
            room = service.get_room(room_id)
        except DomainError as e:
            emit("error", {"message": str(e)})
            return
        except Exception as e:
            logger.error(f"Error joining room {room_id}: {e}", exc_info=True)
            emit("error", {"message": "Could not join room"})
            return

        join_room(room_id)
        logger.info(f"Client {request.sid} joined room {room_id}")
        emit("room_state", room_payload(room))

    @socketio.on("leave_room")
    def handle_leave_room(data):
        """
        Leave a text room.

        Args:
            data: dict with 'room_id' field
        """
        room_id = (data or {}).get("room_id")
        if not room_id:
            emit("error", {"message": "Missing room_id"})
            return

        leave_room(room_id)
        logger.info(f"Client {request.sid} left room {room_id}")
        emit("left_room", {"room_id": room_id})

    @socketio.on("update_text")
    def handle_update_text(data):
        """
        Replace a room's text and broadcast it to the other members.

        Args:
            data: dict with 'room_id' and 'content' fields
        """
        data = data or {}
        room_id = data.get("room_id")
        content = data.get("content")
        if not room_id or content is None:
            emit("error", {"message": "Missing room_id or content"})
            return

        service = getattr(current_app, "text_room_service", None)
        if service is None:
            emit("error", {"message": "Text room service not initialized"})
            return

        try:
            room = service.update_content(room_id, content)
        except DomainError as e:
            emit("error", {"message": str(e)})
            return
        except Exception as e:
            logger.error(f"Error updating room {room_id}: {e}", exc_info=True)
            emit("error", {"message": "Could not update room"})
            return

        emit("text_updated", room_payload(room), to=room_id, include_self=False)

    logger.info("SocketIO event handlers registered")


def emit_text_updated(room):
    """
    Broadcast a room's new text to every member.

    Used when the text changes through the HTTP API.

    Returns:
        True if the event was emitted
    """
    socketio = get_socketio()
    if socketio is None:
        return False

    try:
        socketio.emit("text_updated", room_payload(room), to=room.room_id)
        return True
    except Exception as e:
        logger.error(f"Failed to emit text update for room {room.room_id}: {e}")
        return False
