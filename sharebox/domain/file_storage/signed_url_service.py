"""
Signed URL Service

Generates and validates HMAC-signed, time-limited URLs for blobs served
by the application itself (local storage backend).
"""

import hashlib
import hmac
import secrets
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode


@dataclass
class SignedUrl:
    """
    Represents a signed URL with expiration.
    """

    url: str
    key: str
    method: str
    expires: int
    signature: str

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check if the signed URL has expired."""
        return (now if now is not None else time.time()) >= self.expires

    def get_remaining_seconds(self) -> int:
        """Get remaining seconds until expiration."""
        return max(0, int(self.expires - time.time()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "key": self.key,
            "method": self.method,
            "expires": self.expires,
            "expires_in": self.get_remaining_seconds(),
        }


class SignedUrlService:
    """
    Service for generating and validating signed blob URLs.

    The signature covers the HTTP method, the storage key, the expiry
    timestamp and the optional download filename.
    """

    def __init__(self, secret_key: Optional[str] = None, base_url: str = "/api/v1/blobs"):
        """
        Initialize SignedUrlService.

        Args:
            secret_key: Secret key for HMAC signing (generated if not provided)
            base_url: URL prefix of the blob endpoint
        """
        self.secret_key = secret_key or self._generate_secret_key()
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def _generate_secret_key(length: int = 32) -> str:
        """Generate a cryptographically secure secret key."""
        return secrets.token_hex(length)

    def generate_signed_url(
        self,
        key: str,
        ttl_seconds: int,
        method: str = "GET",
        download_name: Optional[str] = None,
    ) -> SignedUrl:
        """
        Generate a signed URL for a blob.

        Args:
            key: Storage key
            ttl_seconds: Lifetime of the URL in seconds
            method: HTTP method the URL is valid for
            download_name: Filename for Content-Disposition on GET

        Returns:
            SignedUrl with URL and expiration information
        """
        expires = int(time.time()) + ttl_seconds
        method = method.upper()
        signature = self._generate_signature(key, method, expires, download_name)

        params = {"expires": expires, "signature": signature}
        if download_name:
            params["download"] = download_name

        url = f"{self.base_url}/{quote(key)}?{urlencode(params)}"
        return SignedUrl(
            url=url, key=key, method=method, expires=expires, signature=signature
        )

    def _generate_signature(
        self, key: str, method: str, expires: int, download_name: Optional[str]
    ) -> str:
        message = f"{method}:{key}:{expires}:{download_name or ''}"
        return hmac.new(
            self.secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
        ).hexdigest()

    def validate(
        self,
        key: str,
        method: str,
        expires: Optional[str],
        signature: Optional[str],
        download_name: Optional[str] = None,
        now: Optional[float] = None,
    ) -> bool:
        """
        Validate a signed request.

        Args:
            key: Storage key from the URL path
            method: HTTP method of the request
            expires: ``expires`` query parameter
            signature: ``signature`` query parameter
            download_name: ``download`` query parameter
            now: Current time as a unix timestamp

        Returns:
            True if the signature matches and has not expired
        """
        if not signature or not expires:
            return False
        try:
            expires_at = int(expires)
        except (TypeError, ValueError):
            return False

        if (now if now is not None else time.time()) >= expires_at:
            return False

        expected = self._generate_signature(key, method.upper(), expires_at, download_name)
        # Use constant-time comparison to prevent timing attacks
        return hmac.compare_digest(signature, expected)
