"""
File Storage Domain

Blob store contract and signed URL handling.
"""

from .blob_store import BlobStoreError, IBlobStore
from .signed_url_service import SignedUrl, SignedUrlService

__all__ = ["BlobStoreError", "IBlobStore", "SignedUrl", "SignedUrlService"]
