"""
main.py

Flask backend for ShareBox: password-protected, expiring file sharing and
shared text rooms.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, flask-socketio, redis,
    celery, google-cloud-storage
  - Infrastructure: Redis server

Notes:
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Expired projects are reaped by the Celery beat schedule or by
    POST /api/v1/admin/cleanup
"""

import logging
import os

from app_factory import create_app
from sharebox.config.socketio_config import get_socketio, is_socketio_enabled

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

    # Use SocketIO.run if available, otherwise fall back to app.run
    if is_socketio_enabled():
        socketio = get_socketio()
        socketio.run(app, host=host, port=port, debug=debug, allow_unsafe_werkzeug=True)
    else:
        app.run(host=host, port=port, debug=debug)
