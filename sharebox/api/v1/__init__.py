"""
API v1 - ShareBox REST API

This module contains the versioned API endpoints with OpenAPI/Swagger documentation.
"""

import os
from typing import Optional

from flask import Blueprint
from flask_restx import Api

from .namespaces import (
    admin_ns,
    blob_ns,
    download_ns,
    project_ns,
    room_ns,
    system_ns,
    upload_ns,
)

# Get API version from environment
API_VERSION = os.getenv("API_VERSION", "v1")

NAMESPACES = (
    (upload_ns, "/upload"),
    (project_ns, "/projects"),
    (download_ns, "/download"),
    (admin_ns, "/admin"),
    (blob_ns, "/blobs"),
    (room_ns, "/rooms"),
    (system_ns, "/"),
)


def create_api_blueprint(api_version: Optional[str] = None) -> Blueprint:
    """
    Build the v1 blueprint with its Flask-RESTX Api.

    A fresh blueprint is built per application because a Flask-RESTX
    blueprint can only be registered once.

    Args:
        api_version: URL version segment, defaults to API_VERSION

    Returns:
        Blueprint ready for ``app.register_blueprint``
    """
    version = api_version or API_VERSION
    blueprint = Blueprint("api_v1", __name__, url_prefix=f"/api/{version}")

    api = Api(
        blueprint,
        version="1.0",
        title="ShareBox API",
        description="Password-protected, expiring file sharing with shared text rooms",
        doc="/docs",  # Swagger UI will be available at /api/v1/docs
        contact="ShareBox Team",
        license="MIT",
    )

    for namespace, path in NAMESPACES:
        api.add_namespace(namespace, path=path)

    return blueprint
