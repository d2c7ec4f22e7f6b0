"""
Google Cloud Storage Blob Store

Concrete implementation of IBlobStore for Google Cloud Storage.
Uses the google-cloud-storage library and v4 signed URLs so clients can
download and upload blobs directly.
"""

import logging
from datetime import timedelta
from typing import Dict, List, Optional

from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError, NotFound

from sharebox.domain.file_storage.blob_store import BlobStoreError, IBlobStore

logger = logging.getLogger(__name__)

CREATE_ONLY_HEADER = "x-goog-if-generation-match"


class GCSBlobStore(IBlobStore):
    """
    Google Cloud Storage implementation of IBlobStore.

    Thread Safety:
        The GCS client handles concurrent operations safely.

    Attributes:
        bucket: GCS bucket holding every blob
    """

    def __init__(self, bucket: storage.Bucket):
        """
        Initialize the GCS blob store.

        Args:
            bucket: Bucket handle from the GCS client

        Raises:
            ValueError: If no bucket is given
        """
        if bucket is None:
            raise ValueError("bucket cannot be None")
        self.bucket = bucket

    def put(self, key: str, data: bytes, content_type: str) -> bool:
        try:
            blob = self.bucket.blob(key)
            blob.upload_from_string(data, content_type=content_type)
            return True
        except GoogleCloudError as e:
            if "403" in str(e) or "permission" in str(e).lower():
                raise BlobStoreError(f"Insufficient permissions to write to GCS: {e}", e) from e
            raise BlobStoreError(f"Failed to upload blob {key}: {e}", e) from e
        except Exception as e:
            raise BlobStoreError(f"Failed to upload blob {key}: {e}", e) from e

    def get(self, key: str) -> Optional[bytes]:
        try:
            return self.bucket.blob(key).download_as_bytes()
        except NotFound:
            return None
        except Exception as e:
            raise BlobStoreError(f"Failed to download blob {key}: {e}", e) from e

    def delete(self, keys: List[str]) -> Dict[str, bool]:
        results = {}
        for key in keys:
            try:
                self.bucket.blob(key).delete()
                results[key] = True
            except NotFound:
                # Already gone
                results[key] = True
            except Exception as e:
                logger.warning(f"Failed to delete blob {key}: {e}")
                results[key] = False
        return results

    def exists(self, key: str) -> bool:
        try:
            return self.bucket.blob(key).exists()
        except NotFound:
            return False
        except Exception as e:
            raise BlobStoreError(f"Failed to check blob {key}: {e}", e) from e

    def size(self, key: str) -> Optional[int]:
        try:
            blob = self.bucket.get_blob(key)
        except NotFound:
            return None
        except Exception as e:
            raise BlobStoreError(f"Failed to read metadata of blob {key}: {e}", e) from e
        return None if blob is None else blob.size

    def sign(
        self,
        key: str,
        ttl_seconds: int,
        as_download: bool = True,
        filename: Optional[str] = None,
    ) -> str:
        disposition = None
        if as_download:
            disposition = f'attachment; filename="{filename or key.rsplit("/", 1)[-1]}"'
        try:
            return self.bucket.blob(key).generate_signed_url(
                version="v4",
                expiration=timedelta(seconds=ttl_seconds),
                method="GET",
                response_disposition=disposition,
            )
        except Exception as e:
            raise BlobStoreError(f"Failed to sign download URL for {key}: {e}", e) from e

    def sign_upload(self, key: str, ttl_seconds: int, content_type: str) -> str:
        try:
            return self.bucket.blob(key).generate_signed_url(
                version="v4",
                expiration=timedelta(seconds=ttl_seconds),
                method="PUT",
                content_type=content_type,
                headers={CREATE_ONLY_HEADER: "0"},
            )
        except Exception as e:
            raise BlobStoreError(f"Failed to sign upload URL for {key}: {e}", e) from e

    def upload_headers(self, content_type: str) -> Dict[str, str]:
        # Generation 0 matches only when no live object exists
        return {"Content-Type": content_type, CREATE_ONLY_HEADER: "0"}
