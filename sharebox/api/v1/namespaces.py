"""
API Namespaces - Organized endpoint groups
"""

from flask import Response, current_app, redirect, request
from flask_restx import Namespace, Resource

from sharebox.api.admin_auth import require_admin_token
from sharebox.api.v1.models import (
    cleanup_response,
    direct_upload_request,
    error_response,
    health_response,
    password_request,
    project_response,
    register_models,
    reservation_response,
    room_response,
    room_update_request,
    upload_response,
)
from sharebox.api.websocket_events import emit_text_updated
from sharebox.config.gcs_config import gcs_health_check, is_gcs_enabled
from sharebox.config.redis_config import redis_health_check
from sharebox.config.socketio_config import is_socketio_enabled
from sharebox.domain.errors import (
    ApplicationError,
    ConflictError,
    DependencyError,
    DomainError,
    ErrorCategory,
    GoneError,
    NotFoundError,
    TooManyAttemptsError,
    UnauthorizedError,
    ValidationError,
    create_error_response,
)
from sharebox.domain.sharing.value_objects import UploadItem

DOMAIN_ERROR_STATUS = (
    (ValidationError, 400),
    (UnauthorizedError, 401),
    (NotFoundError, 404),
    (GoneError, 410),
    (ConflictError, 409),
    (DependencyError, 500),
)


# =============================================================================
# Upload Namespace - Project creation
# =============================================================================

upload_ns = Namespace("upload", description="Project upload operations")
register_models(upload_ns)


@upload_ns.route("")
class Upload(Resource):
    """Server-side upload"""

    @upload_ns.doc("upload_files")
    @upload_ns.response(201, "Project created", upload_response)
    @upload_ns.response(400, "Bad Request", error_response)
    @upload_ns.response(500, "Storage Error", error_response)
    @upload_ns.response(503, "Service Unavailable", error_response)
    def post(self):
        """
        Upload files and create a project

        Multipart form with one or more `files` parts and an optional
        `projectName`. The response carries the project password; it is
        never shown again.
        """
        service = _get_service("upload_service")
        if service is None:
            return _service_unavailable("Upload service")

        uploads = request.files.getlist("files")
        items = []
        for upload in uploads:
            content = upload.read()
            items.append(UploadItem(
                filename=upload.filename or "",
                size=len(content),
                content_type=upload.mimetype or "application/octet-stream",
                content=content,
            ))

        try:
            result = service.upload(items, project_name=request.form.get("projectName"))
            return result.to_dict(), 201
        except Exception as e:
            return _handle_error(e, "upload")


@upload_ns.route("/direct")
class DirectUpload(Resource):
    """Direct-to-storage upload, phase one"""

    @upload_ns.doc("reserve_direct_upload")
    @upload_ns.expect(direct_upload_request)
    @upload_ns.response(201, "Project reserved", reservation_response)
    @upload_ns.response(400, "Bad Request", error_response)
    @upload_ns.response(500, "Storage Error", error_response)
    def post(self):
        """
        Reserve a project and get signed upload URLs

        Upload each file with `PUT` to its `uploadUrl`, then call
        `/upload/direct/{projectId}/complete`.
        """
        service = _get_service("upload_service")
        if service is None:
            return _service_unavailable("Upload service")

        data = request.get_json(silent=True) or {}
        files = data.get("files")
        if not isinstance(files, list):
            return create_error_response(
                ErrorCategory.INVALID_REQUEST,
                "Missing 'files' list in request body",
                status_code=400,
            )

        items = []
        for entry in files:
            if not isinstance(entry, dict) or not isinstance(entry.get("size"), int):
                return create_error_response(
                    ErrorCategory.INVALID_REQUEST,
                    "Each file needs a 'name' and an integer 'size'",
                    status_code=400,
                )
            items.append(UploadItem(
                filename=str(entry.get("name") or ""),
                size=entry["size"],
                content_type=entry.get("type") or "application/octet-stream",
            ))

        try:
            result = service.reserve(items, project_name=data.get("projectName"))
            return result.to_dict(), 201
        except Exception as e:
            return _handle_error(e, "direct upload")


@upload_ns.route("/direct/<string:project_id>/complete")
@upload_ns.param("project_id", "The project identifier")
class CompleteDirectUpload(Resource):
    """Direct-to-storage upload, phase two"""

    @upload_ns.doc("complete_direct_upload")
    @upload_ns.expect(password_request)
    @upload_ns.response(200, "Upload complete", upload_response)
    @upload_ns.response(400, "Bad Request", error_response)
    @upload_ns.response(401, "Wrong Password", error_response)
    @upload_ns.response(404, "Project Not Found", error_response)
    @upload_ns.response(500, "Upload Incomplete", error_response)
    def post(self, project_id):
        """
        Confirm that every file was uploaded

        Missing files, or files whose size differs from the declared one,
        roll the whole project back.
        """
        service = _get_service("upload_service")
        if service is None:
            return _service_unavailable("Upload service")

        data = request.get_json(silent=True) or {}
        try:
            result = service.complete(project_id, data.get("password"))
            return result.to_dict(), 200
        except Exception as e:
            return _handle_error(e, f"completing upload {project_id}")


# =============================================================================
# Project Namespace - Authenticated listing
# =============================================================================

project_ns = Namespace("projects", description="Shared project operations")
register_models(project_ns)


@project_ns.route("/<string:project_id>")
@project_ns.param("project_id", "The project identifier")
class ProjectListing(Resource):
    """Project file listing"""

    @project_ns.doc("list_project")
    @project_ns.expect(password_request)
    @project_ns.response(200, "Success", project_response)
    @project_ns.response(400, "Malformed Password", error_response)
    @project_ns.response(401, "Wrong Password", error_response)
    @project_ns.response(404, "Project Not Found", error_response)
    @project_ns.response(410, "Project Expired", error_response)
    @project_ns.response(429, "Too Many Attempts", error_response)
    def post(self, project_id):
        """
        List the files of a project

        Requires the project password in the request body.
        """
        service = _get_service("access_service")
        if service is None:
            return _service_unavailable("Access service")

        data = request.get_json(silent=True) or {}
        try:
            listing = service.list_project(
                project_id,
                data.get("password"),
                client_ip=_extract_client_ip(request),
                user_agent=request.headers.get("User-Agent", ""),
            )
            return listing, 200
        except Exception as e:
            return _handle_error(e, f"listing project {project_id}")


# =============================================================================
# Download Namespace - Authenticated file downloads
# =============================================================================

download_ns = Namespace("download", description="File download operations")
register_models(download_ns)


@download_ns.route("/<string:project_id>/<string:filename>")
@download_ns.param("project_id", "The project identifier")
@download_ns.param("filename", "The sanitized filename")
class DownloadFile(Resource):
    """Download one file"""

    @download_ns.doc(
        "download_file",
        params={
            "password": "Project password",
            "mode": "stream (default) or redirect",
        },
    )
    @download_ns.response(200, "File content")
    @download_ns.response(302, "Redirect to signed URL")
    @download_ns.response(400, "Bad Request", error_response)
    @download_ns.response(401, "Wrong Password", error_response)
    @download_ns.response(404, "Not Found", error_response)
    @download_ns.response(410, "Project Expired", error_response)
    @download_ns.response(429, "Too Many Attempts", error_response)
    def get(self, project_id, filename):
        """
        Download a file from a project

        `mode=stream` returns the bytes, `mode=redirect` answers with a
        redirect to a short-lived signed URL.
        """
        service = _get_service("access_service")
        if service is None:
            return _service_unavailable("Access service")

        try:
            descriptor = service.get_download(
                project_id,
                filename,
                request.args.get("password"),
                mode=request.args.get("mode", "stream"),
                client_ip=_extract_client_ip(request),
                user_agent=request.headers.get("User-Agent", ""),
            )
        except Exception as e:
            return _handle_error(e, f"downloading {project_id}/{filename}")

        if descriptor.mode == "redirect":
            response = redirect(descriptor.url, code=302)
            response.headers["Cache-Control"] = "no-store"
            return response

        return Response(
            descriptor.content,
            mimetype=descriptor.file.content_type,
            headers={
                "Content-Disposition": f'attachment; filename="{descriptor.file.name}"',
                "Content-Length": str(len(descriptor.content)),
                "Cache-Control": "no-store",
            },
        )


# =============================================================================
# Admin Namespace - Cleanup
# =============================================================================

admin_ns = Namespace("admin", description="Administrative operations")
register_models(admin_ns)


@admin_ns.route("/cleanup")
class Cleanup(Resource):
    """Expired project cleanup"""

    @admin_ns.doc("preview_cleanup", security="Bearer")
    @admin_ns.response(200, "Dry run", cleanup_response)
    @admin_ns.response(401, "Unauthorized", error_response)
    @admin_ns.response(503, "Service Unavailable", error_response)
    @require_admin_token
    def get(self):
        """
        Preview cleanup

        Reports what a cleanup run would delete without changing anything.
        """
        return _run_cleanup("preview")

    @admin_ns.doc("execute_cleanup", security="Bearer")
    @admin_ns.response(200, "Cleanup summary", cleanup_response)
    @admin_ns.response(401, "Unauthorized", error_response)
    @admin_ns.response(503, "Service Unavailable", error_response)
    @require_admin_token
    def post(self):
        """
        Run cleanup

        Deletes the blobs of every expired project and marks the projects
        deleted.
        """
        return _run_cleanup("execute")


def _run_cleanup(mode: str):
    reaper = _get_service("reaper_service")
    if reaper is None:
        return _service_unavailable("Cleanup service")

    try:
        report = reaper.run(mode)
        current_app.logger.info(
            f"Admin cleanup ({mode}): {report.deleted_projects} project(s), "
            f"{report.failed_projects} failed"
        )
        return report.to_dict(), 200
    except Exception as e:
        return _handle_error(e, f"cleanup {mode}")


# =============================================================================
# Blob Namespace - Signed URL endpoint for local storage
# =============================================================================

blob_ns = Namespace("blobs", description="Signed blob access for local storage")
register_models(blob_ns)


@blob_ns.route("/<path:key>")
@blob_ns.param("key", "The storage key")
class Blob(Resource):
    """Signed blob access"""

    @blob_ns.doc("get_blob", params={"expires": "Expiry", "signature": "HMAC signature",
                                     "download": "Attachment filename"})
    @blob_ns.response(200, "Blob content")
    @blob_ns.response(403, "Invalid Signature", error_response)
    @blob_ns.response(404, "Blob Not Found", error_response)
    def get(self, key):
        """Download a blob with a signed URL"""
        blob_store, denied = _check_signature(key, "GET")
        if denied:
            return denied

        download_name = request.args.get("download")
        try:
            content = blob_store.get(key)
        except Exception as e:
            return _handle_error(e, f"reading blob {key}")

        if content is None:
            return create_error_response(
                ErrorCategory.FILE_NOT_FOUND, f"Blob {key} not found", status_code=404
            )

        content_type = "application/octet-stream"
        if hasattr(blob_store, "content_type"):
            content_type = blob_store.content_type(key)

        headers = {"Content-Length": str(len(content)), "Cache-Control": "no-store"}
        if download_name:
            headers["Content-Disposition"] = f'attachment; filename="{download_name}"'
        return Response(content, mimetype=content_type, headers=headers)

    @blob_ns.doc("put_blob", params={"expires": "Expiry", "signature": "HMAC signature"})
    @blob_ns.response(200, "Blob stored")
    @blob_ns.response(400, "Size Differs From Reservation", error_response)
    @blob_ns.response(403, "Invalid Signature", error_response)
    @blob_ns.response(404, "Nothing Reserved At Key", error_response)
    @blob_ns.response(409, "Blob Already Stored", error_response)
    def put(self, key):
        """
        Upload a blob with a signed URL

        The key must belong to a direct-upload reservation. The body must
        have the declared size and each key accepts a single upload.
        """
        blob_store, denied = _check_signature(key, "PUT")
        if denied:
            return denied

        service = _get_service("upload_service")
        if service is None:
            return _service_unavailable("Upload service")

        data = request.get_data()
        try:
            shared_file = service.authorize_direct_put(key, len(data))
            blob_store.put(key, data, shared_file.content_type)
        except Exception as e:
            return _handle_error(e, f"writing blob {key}")

        return {"storageKey": key, "size": len(data)}, 200


def _check_signature(key: str, method: str):
    """
    Returns:
        Tuple of (blob_store, error_response); error_response is None when
        the request may proceed
    """
    blob_store = _get_service("blob_store")
    signer = _get_service("signed_url_service")
    if blob_store is None or signer is None:
        return None, _service_unavailable("Blob service")

    valid = signer.validate(
        key,
        method,
        request.args.get("expires"),
        request.args.get("signature"),
        download_name=request.args.get("download") if method == "GET" else None,
    )
    if not valid:
        current_app.logger.warning(f"Invalid or expired signature for blob {key}")
        return blob_store, create_error_response(
            ErrorCategory.INVALID_REQUEST, "Invalid or expired signature", status_code=403
        )
    return blob_store, None


# =============================================================================
# Room Namespace - Shared text rooms
# =============================================================================

room_ns = Namespace("rooms", description="Shared text room operations")
register_models(room_ns)


def _room_to_dict(room) -> dict:
    return {
        "roomId": room.room_id,
        "content": room.content,
        "createdAt": room.created_at.isoformat(),
        "updatedAt": room.updated_at.isoformat(),
    }


@room_ns.route("")
class RoomList(Resource):
    """Room creation"""

    @room_ns.doc("create_room")
    @room_ns.response(201, "Room created", room_response)
    @room_ns.response(500, "Storage Error", error_response)
    def post(self):
        """Create an empty text room"""
        service = _get_service("text_room_service")
        if service is None:
            return _service_unavailable("Text room service")

        try:
            room = service.create_room()
            return _room_to_dict(room), 201
        except Exception as e:
            return _handle_error(e, "creating room")


@room_ns.route("/<string:room_id>")
@room_ns.param("room_id", "The room identifier")
class Room(Resource):
    """Single room operations"""

    @room_ns.doc("get_room")
    @room_ns.response(200, "Success", room_response)
    @room_ns.response(400, "Malformed Room Id", error_response)
    @room_ns.response(404, "Room Not Found", error_response)
    def get(self, room_id):
        """Get a room's current text"""
        service = _get_service("text_room_service")
        if service is None:
            return _service_unavailable("Text room service")

        try:
            return _room_to_dict(service.get_room(room_id)), 200
        except Exception as e:
            return _handle_error(e, f"loading room {room_id}")

    @room_ns.doc("update_room")
    @room_ns.expect(room_update_request)
    @room_ns.response(200, "Updated", room_response)
    @room_ns.response(400, "Bad Request", error_response)
    @room_ns.response(404, "Room Not Found", error_response)
    def put(self, room_id):
        """
        Replace a room's text

        The new text is broadcast to every websocket client in the room.
        """
        service = _get_service("text_room_service")
        if service is None:
            return _service_unavailable("Text room service")

        data = request.get_json(silent=True) or {}
        if "content" not in data:
            return create_error_response(
                ErrorCategory.INVALID_REQUEST,
                "Missing 'content' in request body",
                status_code=400,
            )

        try:
            room = service.update_content(room_id, data["content"])
        except Exception as e:
            return _handle_error(e, f"updating room {room_id}")

        emit_text_updated(room)
        return _room_to_dict(room), 200


# =============================================================================
# System Namespace - System health and monitoring
# =============================================================================

system_ns = Namespace("system", description="System health and monitoring operations")
register_models(system_ns)


@system_ns.route("/health")
class Health(Resource):
    """System health check"""

    @system_ns.doc("health_check")
    @system_ns.response(200, "Healthy", health_response)
    @system_ns.response(503, "Service Degraded", health_response)
    def get(self):
        """
        Check system health and service availability

        Returns the health status of Redis, Celery, blob storage and SocketIO.
        """
        return get_health_status(current_app)


def get_health_status(app) -> tuple[dict, int]:
    """
    Get health status of all system components.

    Returns:
        Tuple of (health_status_dict, http_status_code)
    """
    health_status = {
        "status": "ok",
        "message": "backend ready",
        "redis": "unknown",
        "celery": "unknown",
        "storage": "unknown",
        "socketio": "unknown",
    }

    # Check Redis connectivity
    try:
        if redis_health_check():
            health_status["redis"] = "connected"
        else:
            health_status["redis"] = "disconnected"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["redis"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    # Check Celery availability
    if getattr(app, "celery", None) is not None:
        health_status["celery"] = "available"
    else:
        health_status["celery"] = "unavailable"
        health_status["status"] = "degraded"

    # Check blob storage backend
    blob_store = getattr(app, "blob_store", None)
    if blob_store is None:
        health_status["storage"] = "unavailable"
        health_status["status"] = "degraded"
    elif is_gcs_enabled():
        try:
            health_status["storage"] = "gcs" if gcs_health_check() else "gcs: disconnected"
        except Exception as e:
            health_status["storage"] = f"gcs error: {str(e)}"
    else:
        health_status["storage"] = "local"

    # Check SocketIO availability (optional - not critical)
    if is_socketio_enabled():
        health_status["socketio"] = "available"
    else:
        health_status["socketio"] = "not_configured"

    status_code = 200 if health_status["status"] == "ok" else 503
    return health_status, status_code


# =============================================================================
# Helper Functions
# =============================================================================

def _extract_client_ip(request) -> str:
    """
    Extract client IP from request.

    Checks X-Forwarded-For first (original client of a proxy chain), then
    X-Real-IP, then the direct connection address.

    Args:
        request: Flask request object

    Returns:
        Client IP address as string, "unknown" when nothing is available
    """
    # Format: "client, proxy1, proxy2"
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return request.remote_addr or "unknown"


def _get_service(name: str):
    """Get a service attached to the current app, or None."""
    return getattr(current_app, name, None)


def _service_unavailable(label: str):
    return create_error_response(
        ErrorCategory.SERVICE_UNAVAILABLE,
        f"{label} not initialized",
        status_code=503,
    )


def _handle_error(error: Exception, operation: str):
    """
    Map an exception raised by a service to an error response.

    Domain errors map to their HTTP status. Storage failures and anything
    unexpected are logged and answered without internal detail.
    """
    if isinstance(error, TooManyAttemptsError):
        current_app.logger.info(f"Too many attempts during {operation}")
        headers = {}
        if "retry_after" in error.context:
            headers["Retry-After"] = str(error.context["retry_after"])
        return error.to_dict(), error.http_status_code, headers

    if isinstance(error, ApplicationError):
        return error.to_dict(), 400

    if isinstance(error, DomainError):
        for error_type, status_code in DOMAIN_ERROR_STATUS:
            if isinstance(error, error_type):
                break
        else:
            status_code = 500

        if status_code >= 500:
            current_app.logger.error(f"Dependency failure during {operation}: {error}")
            return create_error_response(error.category, status_code=status_code)

        context = None
        if isinstance(error, ValidationError) and error.violations:
            context = {"violations": [v.to_dict() for v in error.violations]}
        return create_error_response(error.category, str(error), context, status_code)

    current_app.logger.exception(f"Unexpected error during {operation}: {error}")
    return create_error_response(ErrorCategory.SYSTEM_ERROR, status_code=500)
