"""
Blob Store Interface

Defines the abstract interface for binary storage operations.
This interface enables different storage implementations (local, GCS)
while keeping the domain layer independent of infrastructure concerns.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..errors import DependencyError


class BlobStoreError(DependencyError):
    """Raised when a blob store operation fails."""
    pass


class IBlobStore(ABC):
    """
    Abstract interface for blob storage operations.

    Blobs are addressed by storage keys of the form
    ``{project_id}/{file_name}``.
    """

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> bool:
        """
        Store blob content.

        Args:
            key: Storage key
            data: Blob content
            content_type: MIME type recorded with the blob

        Returns:
            True if stored

        Raises:
            BlobStoreError: If the write failed
        """
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """
        Read blob content.

        Returns:
            Blob bytes, or None if no blob exists at the key

        Raises:
            BlobStoreError: If the read failed
        """
        pass

    @abstractmethod
    def delete(self, keys: List[str]) -> Dict[str, bool]:
        """
        Delete several blobs.

        Deleting a missing blob counts as success.

        Returns:
            Mapping of key to whether that deletion succeeded
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """
        Check whether a blob exists.

        Raises:
            BlobStoreError: If the store could not be asked
        """
        pass

    @abstractmethod
    def size(self, key: str) -> Optional[int]:
        """
        Size in bytes of the stored blob.

        Returns:
            Byte count, or None if no blob exists at the key

        Raises:
            BlobStoreError: If the store could not be asked
        """
        pass

    @abstractmethod
    def sign(
        self,
        key: str,
        ttl_seconds: int,
        as_download: bool = True,
        filename: Optional[str] = None,
    ) -> str:
        """
        Create a time-limited URL for reading a blob.

        Args:
            key: Storage key
            ttl_seconds: URL lifetime
            as_download: Ask the client to save rather than display the blob
            filename: Name offered for the saved file

        Raises:
            BlobStoreError: If signing failed
        """
        pass

    @abstractmethod
    def sign_upload(self, key: str, ttl_seconds: int, content_type: str) -> str:
        """
        Create a time-limited URL the client can PUT the blob to.

        The URL only creates the blob; it never replaces one already stored.
        """
        pass

    def upload_headers(self, content_type: str) -> Dict[str, str]:
        """Headers the client must send with its PUT to a signed upload URL."""
        return {"Content-Type": content_type}
