"""
Local Blob Store

Concrete implementation of IBlobStore for the local filesystem.
Signed URLs point at the application's own blob endpoint and are
verified with the SignedUrlService.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from sharebox.domain.file_storage.blob_store import BlobStoreError, IBlobStore
from sharebox.domain.file_storage.signed_url_service import SignedUrlService

logger = logging.getLogger(__name__)

META_DIR = ".meta"


class LocalBlobStore(IBlobStore):
    """
    Local filesystem implementation of IBlobStore.

    Blobs live at ``{base_path}/{key}``. Their content types are kept in
    ``{base_path}/.meta/{key}``.

    Attributes:
        base_path: Base directory for blob storage
        signer: Signs URLs for the blob endpoint
    """

    def __init__(self, base_path: str, signer: SignedUrlService):
        """
        Initialize the local blob store.

        Args:
            base_path: Base directory for blob storage
            signer: Signed URL service for download and upload URLs

        Raises:
            BlobStoreError: If the base directory cannot be created
        """
        self.base_path = Path(base_path).resolve()
        self.signer = signer
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BlobStoreError(f"Failed to create storage directory: {self.base_path}", e) from e

    def _path_for(self, key: str, meta: bool = False) -> Path:
        """
        Resolve a storage key to a path inside the base directory.

        Raises:
            BlobStoreError: If the key escapes the base directory
        """
        if not key or not key.strip():
            raise BlobStoreError("Storage key cannot be empty")
        root = self.base_path / META_DIR if meta else self.base_path
        path = (root / key).resolve()
        if not path.is_relative_to(root.resolve()) or path == root.resolve():
            raise BlobStoreError(f"Storage key outside storage directory: {key!r}")
        return path

    def put(self, key: str, data: bytes, content_type: str) -> bool:
        path = self._path_for(key)
        meta_path = self._path_for(key, meta=True)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            meta_path.write_text(content_type or "application/octet-stream", encoding="utf-8")
            return True
        except OSError as e:
            raise BlobStoreError(f"Failed to save blob {key}: {e}", e) from e

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise BlobStoreError(f"Failed to read blob {key}: {e}", e) from e

    def content_type(self, key: str) -> str:
        """Content type recorded when the blob was stored."""
        try:
            return self._path_for(key, meta=True).read_text(encoding="utf-8").strip()
        except (OSError, BlobStoreError):
            return "application/octet-stream"

    def delete(self, keys: List[str]) -> Dict[str, bool]:
        results = {}
        for key in keys:
            try:
                path = self._path_for(key)
                path.unlink(missing_ok=True)
                self._path_for(key, meta=True).unlink(missing_ok=True)
                self._remove_empty_parent(path)
                results[key] = True
            except (OSError, BlobStoreError) as e:
                logger.warning(f"Failed to delete blob {key}: {e}")
                results[key] = False
        return results

    def _remove_empty_parent(self, path: Path) -> None:
        parent = path.parent
        if parent != self.base_path:
            try:
                parent.rmdir()
            except OSError:
                # Still holds other blobs
                pass

    def exists(self, key: str) -> bool:
        try:
            return self._path_for(key).is_file()
        except BlobStoreError:
            return False

    def size(self, key: str) -> Optional[int]:
        path = self._path_for(key)
        try:
            return path.stat().st_size if path.is_file() else None
        except OSError as e:
            raise BlobStoreError(f"Failed to stat blob {key}: {e}", e) from e

    def sign(
        self,
        key: str,
        ttl_seconds: int,
        as_download: bool = True,
        filename: Optional[str] = None,
    ) -> str:
        download_name = (filename or key.rsplit("/", 1)[-1]) if as_download else None
        return self.signer.generate_signed_url(
            key, ttl_seconds, method="GET", download_name=download_name
        ).url

    def sign_upload(self, key: str, ttl_seconds: int, content_type: str) -> str:
        return self.signer.generate_signed_url(key, ttl_seconds, method="PUT").url
