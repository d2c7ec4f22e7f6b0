"""
Sharing Value Objects

Immutable value objects for share passwords, storage keys and upload items.
"""

import secrets
import string
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional, Union

from ..errors import InvalidPasswordFormatError

PASSWORD_LENGTH = 12
PASSWORD_ALPHABET = string.ascii_letters + string.digits


@dataclass(frozen=True)
class SharePassword:
    """
    Value object representing a well-formed share password.

    A share password is exactly 12 characters drawn from ``[A-Za-z0-9]``.
    Construction fails for anything else, so holding an instance means the
    format check has passed.
    """
    value: str

    def __post_init__(self):
        if not self.is_valid(self.value):
            raise InvalidPasswordFormatError("Password has an invalid format")

    @staticmethod
    def is_valid(value: Optional[str]) -> bool:
        """
        Check a candidate password against the generation policy.

        Args:
            value: Candidate password

        Returns:
            True only for strings of the exact length and alphabet
        """
        if not value or not isinstance(value, str):
            return False
        if len(value) != PASSWORD_LENGTH:
            return False
        return all(c in PASSWORD_ALPHABET for c in value)

    @classmethod
    def generate(cls) -> "SharePassword":
        """
        Generate a new random password.

        Uses the ``secrets`` module, giving about 71 bits of entropy.
        """
        return cls("".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(PASSWORD_LENGTH)))

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return "SharePassword('***')"


@dataclass(frozen=True)
class StorageKey:
    """Blob address derived as ``{project_id}/{file_name}``."""
    project_id: str
    file_name: str

    def __post_init__(self):
        if not self.project_id or "/" in self.project_id:
            raise ValueError(f"Invalid project id for storage key: {self.project_id!r}")
        if not self.file_name or "/" in self.file_name or self.file_name in (".", ".."):
            raise ValueError(f"Invalid file name for storage key: {self.file_name!r}")

    @property
    def value(self) -> str:
        return f"{self.project_id}/{self.file_name}"

    def __str__(self) -> str:
        return self.value


class AccessState(Enum):
    """Steps of the access gate, in evaluation order."""

    PENDING = "pending"
    PASSWORD_FORMAT_CHECKED = "password_format_checked"
    PROJECT_FOUND = "project_found"
    NOT_DELETED = "not_deleted"
    NOT_EXPIRED = "not_expired"
    PASSWORD_MATCHED = "password_matched"
    GRANTED = "granted"


@dataclass(frozen=True)
class UploadItem:
    """
    One file of an upload batch as declared by the client.

    ``content`` is absent for two-phase uploads, where the client sends the
    bytes straight to storage.
    """
    filename: str
    size: int
    content_type: str = "application/octet-stream"
    content: Optional[Union[bytes, BinaryIO]] = None

    def read_bytes(self) -> bytes:
        """Return the payload as bytes, reading file-like content from the start."""
        if self.content is None:
            return b""
        if isinstance(self.content, (bytes, bytearray)):
            return bytes(self.content)
        if hasattr(self.content, "seek"):
            self.content.seek(0)
        return self.content.read()
