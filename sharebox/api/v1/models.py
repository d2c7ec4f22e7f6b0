"""
API Models for request/response documentation
"""

from flask_restx import Model, fields

# =============================================================================
# Request Models
# =============================================================================

password_request = Model(
    "PasswordRequest",
    {
        "password": fields.String(
            required=True,
            description="12-character project password",
            example="aB3dE5gH7jK9",
        )
    },
)

direct_file = Model(
    "DirectUploadFile",
    {
        "name": fields.String(required=True, description="Original filename", example="report.pdf"),
        "size": fields.Integer(required=True, description="Size in bytes", example=10),
        "type": fields.String(description="Content type", example="application/pdf"),
    },
)

direct_upload_request = Model(
    "DirectUploadRequest",
    {
        "projectName": fields.String(description="Display name (generated when omitted)"),
        "files": fields.List(fields.Nested(direct_file), required=True),
    },
)

room_update_request = Model(
    "RoomUpdateRequest",
    {
        "content": fields.String(required=True, description="New room text"),
    },
)

# =============================================================================
# Response Models
# =============================================================================

file_descriptor = Model(
    "FileDescriptor",
    {
        "name": fields.String(description="Sanitized filename"),
        "size": fields.Integer(description="Size in bytes"),
        "contentType": fields.String(description="Declared content type"),
        "downloadPath": fields.String(description="Download endpoint path"),
    },
)

upload_response = Model(
    "UploadResponse",
    {
        "projectId": fields.String(description="Project identifier"),
        "projectName": fields.String(description="Display name"),
        "password": fields.String(description="Project password, shown only once"),
        "expiresAt": fields.DateTime(description="Expiry timestamp (ISO 8601)"),
        "files": fields.List(fields.Nested(file_descriptor)),
    },
)

upload_slot = Model(
    "UploadSlot",
    {
        "name": fields.String(description="Sanitized filename"),
        "storageKey": fields.String(description="Storage key"),
        "uploadUrl": fields.String(description="Signed PUT URL"),
        "headers": fields.Raw(description="Headers the PUT must carry"),
    },
)

reservation_response = Model(
    "ReservationResponse",
    {
        "projectId": fields.String(description="Project identifier"),
        "projectName": fields.String(description="Display name"),
        "password": fields.String(description="Project password, shown only once"),
        "expiresAt": fields.DateTime(description="Expiry timestamp (ISO 8601)"),
        "uploads": fields.List(fields.Nested(upload_slot)),
    },
)

project_response = Model(
    "ProjectResponse",
    {
        "projectId": fields.String(description="Project identifier"),
        "projectName": fields.String(description="Display name"),
        "createdAt": fields.DateTime(description="Creation timestamp"),
        "expiresAt": fields.DateTime(description="Expiry timestamp"),
        "totalSize": fields.Integer(description="Total size in bytes"),
        "files": fields.List(fields.Nested(file_descriptor)),
    },
)

cleanup_project = Model(
    "CleanupProject",
    {
        "id": fields.String(description="Project identifier"),
        "name": fields.String(description="Display name"),
        "expiredAt": fields.DateTime(description="Expiry timestamp"),
        "filesCount": fields.Integer(description="Number of files"),
        "totalSize": fields.Integer(description="Total size in bytes"),
    },
)

cleanup_response = Model(
    "CleanupResponse",
    {
        "mode": fields.String(description="preview or execute", enum=["preview", "execute"]),
        "deletedProjects": fields.Integer(description="Projects deleted (or to delete)"),
        "deletedFiles": fields.Integer(description="Blobs deleted (or to delete)"),
        "totalSizeDeleted": fields.Integer(description="Bytes reclaimed (or to reclaim)"),
        "failedProjects": fields.Integer(description="Projects that could not be processed"),
        "failedFiles": fields.Integer(description="Blobs that could not be deleted"),
        "projects": fields.List(fields.Nested(cleanup_project)),
    },
)

room_response = Model(
    "RoomResponse",
    {
        "roomId": fields.String(description="Room identifier"),
        "content": fields.String(description="Current text"),
        "createdAt": fields.DateTime(description="Creation timestamp"),
        "updatedAt": fields.DateTime(description="Last update timestamp"),
    },
)

error_response = Model(
    "ErrorResponse",
    {
        "error": fields.String(description="Error category"),
        "title": fields.String(description="Short error title"),
        "message": fields.String(description="User-friendly message"),
        "action": fields.String(description="Suggested action"),
        "violations": fields.List(fields.Raw, description="Per-file problems"),
    },
)

health_response = Model(
    "HealthResponse",
    {
        "status": fields.String(description="Overall status", enum=["ok", "degraded"]),
        "message": fields.String(description="Status message"),
        "redis": fields.String(description="Redis status"),
        "celery": fields.String(description="Celery status"),
        "storage": fields.String(description="Blob storage backend"),
        "socketio": fields.String(description="SocketIO status"),
    },
)

ALL_MODELS = (
    password_request,
    direct_file,
    direct_upload_request,
    room_update_request,
    file_descriptor,
    upload_response,
    upload_slot,
    reservation_response,
    project_response,
    cleanup_project,
    cleanup_response,
    room_response,
    error_response,
    health_response,
)


def register_models(ns) -> None:
    """Attach every schema to a namespace so any Api adding it can render them."""
    for model in ALL_MODELS:
        ns.add_model(model.name, model)
