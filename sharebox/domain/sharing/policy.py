"""
Security Policy

Pure predicates for file type and size limits on shared projects.
"""

from dataclasses import dataclass, field
from typing import FrozenSet

GIB = 1024 * 1024 * 1024

DEFAULT_BLOCKED_EXTENSIONS = frozenset({
    ".exe", ".bat", ".cmd", ".scr", ".vbs", ".js", ".jar", ".com", ".pif",
    ".app", ".gadget", ".msi", ".msp", ".hta", ".ps1", ".sh", ".deb",
    ".rpm", ".dmg", ".pkg",
})

DEFAULT_BLOCKED_MIME_TYPES = frozenset({
    "application/x-msdownload",
    "application/x-executable",
    "application/x-winexe",
    "application/x-ms-dos-executable",
    "text/javascript",
    "application/javascript",
})


@dataclass(frozen=True)
class SecurityPolicy:
    """
    File acceptance rules for an upload batch.

    Attributes:
        max_files: Maximum number of files per project
        max_file_size: Maximum size of a single file in bytes
        max_project_size: Maximum combined size of a project in bytes
        blocked_extensions: Lowercase extensions (with dot) that are rejected
        blocked_mime_types: Lowercase MIME types that are rejected
    """
    max_files: int = 100
    max_file_size: int = GIB
    max_project_size: int = 2 * GIB
    blocked_extensions: FrozenSet[str] = field(default=DEFAULT_BLOCKED_EXTENSIONS)
    blocked_mime_types: FrozenSet[str] = field(default=DEFAULT_BLOCKED_MIME_TYPES)

    def __post_init__(self):
        if self.max_files <= 0:
            raise ValueError(f"max_files must be positive, got {self.max_files}")
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be positive, got {self.max_file_size}")
        if self.max_project_size < self.max_file_size:
            raise ValueError("max_project_size must not be smaller than max_file_size")

    @staticmethod
    def extension_of(name: str) -> str:
        """Return the lowercased extension including the dot, or an empty string."""
        lowered = (name or "").lower()
        last_dot = lowered.rfind(".")
        return lowered[last_dot:] if last_dot >= 0 else ""

    def is_file_allowed(self, name: str, mime_type: str) -> bool:
        """Check the file against the extension and MIME type denylists."""
        if self.extension_of(name) in self.blocked_extensions:
            return False
        mime = (mime_type or "").split(";")[0].strip().lower()
        return mime not in self.blocked_mime_types

    def is_file_size_allowed(self, size: int) -> bool:
        return 0 < size <= self.max_file_size

    def is_project_size_allowed(self, current_total: int, incoming_size: int) -> bool:
        return current_total + incoming_size <= self.max_project_size

    def is_file_count_allowed(self, count: int) -> bool:
        return 0 < count <= self.max_files
