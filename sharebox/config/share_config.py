"""
Share Configuration

Environment-based configuration for uploads, retention, storage and rooms.
Provides centralized configuration management with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import FrozenSet, Optional

from sharebox.domain.sharing.policy import (
    DEFAULT_BLOCKED_EXTENSIONS,
    DEFAULT_BLOCKED_MIME_TYPES,
    GIB,
    SecurityPolicy,
)


@dataclass
class ShareConfig:
    """
    Share configuration from environment variables.

    Every component receives the values it needs from this object at
    construction time; nothing reads the environment afterwards.
    """

    # Upload limits
    max_files: int = 100
    max_file_size: int = GIB
    max_project_size: int = 2 * GIB
    blocked_extensions: FrozenSet[str] = field(default=DEFAULT_BLOCKED_EXTENSIONS)
    blocked_mime_types: FrozenSet[str] = field(default=DEFAULT_BLOCKED_MIME_TYPES)

    # Lifecycle
    retention_days: float = 7
    cleanup_interval_seconds: int = 3600

    # Access
    admin_token: Optional[str] = None
    password_hash_method: Optional[str] = None

    # Storage
    bucket_name: Optional[str] = None
    storage_dir: str = "/tmp/sharebox"
    signed_url_ttl: int = 3600
    upload_url_ttl: int = 3600
    secret_key: Optional[str] = None
    public_base_url: str = ""

    # Text rooms
    room_id_length: int = 4
    room_ttl_hours: int = 24
    room_max_content_length: int = 100_000

    def __post_init__(self):
        """Validate limits."""
        for name in ("max_files", "max_file_size", "max_project_size",
                     "signed_url_ttl", "upload_url_ttl", "room_id_length",
                     "room_ttl_hours", "room_max_content_length",
                     "cleanup_interval_seconds"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.retention_days <= 0:
            raise ValueError(f"retention_days must be positive, got {self.retention_days}")
        if self.max_file_size > self.max_project_size:
            raise ValueError("MAX_FILE_SIZE must not exceed MAX_PROJECT_SIZE")

    @classmethod
    def from_env(cls) -> "ShareConfig":
        """
        Load configuration from environment variables.

        Returns:
            ShareConfig instance with loaded configuration
        """
        return cls(
            max_files=int(os.getenv("MAX_FILES", "100")),
            max_file_size=int(os.getenv("MAX_FILE_SIZE", str(GIB))),
            max_project_size=int(os.getenv("MAX_PROJECT_SIZE", str(2 * GIB))),
            blocked_extensions=cls._parse_set(
                os.getenv("BLOCKED_EXTENSIONS", ""), DEFAULT_BLOCKED_EXTENSIONS
            ),
            blocked_mime_types=cls._parse_set(
                os.getenv("BLOCKED_MIME_TYPES", ""), DEFAULT_BLOCKED_MIME_TYPES
            ),
            retention_days=float(os.getenv("RETENTION_DAYS", "7")),
            cleanup_interval_seconds=int(os.getenv("CLEANUP_INTERVAL_SECONDS", "3600")),
            admin_token=os.getenv("ADMIN_API_KEY") or None,
            password_hash_method=os.getenv("PASSWORD_HASH_METHOD") or None,
            bucket_name=os.getenv("GCS_BUCKET_NAME") or None,
            storage_dir=os.getenv("STORAGE_DIR", "/tmp/sharebox"),
            signed_url_ttl=int(os.getenv("SIGNED_URL_TTL", "3600")),
            upload_url_ttl=int(os.getenv("UPLOAD_URL_TTL", "3600")),
            secret_key=os.getenv("SECRET_KEY") or None,
            public_base_url=os.getenv("PUBLIC_BASE_URL", "").rstrip("/"),
            room_id_length=int(os.getenv("ROOM_ID_LENGTH", "4")),
            room_ttl_hours=int(os.getenv("ROOM_TTL_HOURS", "24")),
            room_max_content_length=int(os.getenv("ROOM_MAX_CONTENT_LENGTH", "100000")),
        )

    @staticmethod
    def _parse_set(value: str, default: FrozenSet[str]) -> FrozenSet[str]:
        """
        Parse a comma-separated override list.

        Example: ".exe,.bat,.sh"
        """
        if not value:
            return default
        return frozenset(item.strip().lower() for item in value.split(",") if item.strip())

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.retention_days)

    @property
    def room_ttl_seconds(self) -> int:
        return self.room_ttl_hours * 3600

    def security_policy(self) -> SecurityPolicy:
        """Build the security policy for these limits."""
        return SecurityPolicy(
            max_files=self.max_files,
            max_file_size=self.max_file_size,
            max_project_size=self.max_project_size,
            blocked_extensions=self.blocked_extensions,
            blocked_mime_types=self.blocked_mime_types,
        )
