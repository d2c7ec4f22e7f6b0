"""
Admin Authentication

Decorator guarding admin endpoints with the ADMIN_API_KEY bearer token.
"""

import hmac
from functools import wraps
from typing import Optional

from flask import current_app, request

from sharebox.domain.errors import ErrorCategory, create_error_response


def _extract_token(req) -> Optional[str]:
    """Read the token from ``Authorization: Bearer`` or ``X-API-Key``."""
    auth_header = req.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return req.headers.get("X-API-Key") or None


def require_admin_token(f):
    """
    Decorator restricting a route to holders of the admin token.

    Returns 503 when no admin token is configured and 401 when the
    request's token is missing or wrong.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        share_config = getattr(current_app, "share_config", None)
        expected = share_config.admin_token if share_config else None
        if not expected:
            current_app.logger.warning("Admin endpoint called but ADMIN_API_KEY is not set")
            return create_error_response(
                ErrorCategory.SERVICE_UNAVAILABLE,
                "Admin API key not configured",
                status_code=503,
            )

        supplied = _extract_token(request)
        if not supplied or not hmac.compare_digest(supplied.encode(), expected.encode()):
            current_app.logger.info(f"Rejected admin request to {request.path}")
            return create_error_response(
                ErrorCategory.ADMIN_UNAUTHORIZED,
                "Invalid admin token",
                status_code=401,
            )

        return f(*args, **kwargs)

    return decorated_function
