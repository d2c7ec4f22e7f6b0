"""
Google Cloud Storage Configuration

Manages GCS client initialization for the blob store.
"""

import logging
import os
from typing import Optional

from google.cloud import storage
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

# Global GCS client instance
_gcs_client: Optional[storage.Client] = None
_gcs_bucket: Optional[storage.Bucket] = None


def init_gcs(bucket_name: Optional[str]) -> Optional[storage.Bucket]:
    """
    Initialize Google Cloud Storage client and bucket.

    Args:
        bucket_name: Bucket holding the shared blobs

    Returns:
        Bucket handle, or None if GCS is not configured or not reachable
    """
    global _gcs_client, _gcs_bucket

    if not bucket_name:
        logger.info("GCS_BUCKET_NAME not set, GCS integration disabled")
        return None

    credentials_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

    try:
        if credentials_path and os.path.exists(credentials_path):
            credentials = service_account.Credentials.from_service_account_file(
                credentials_path
            )
            _gcs_client = storage.Client(credentials=credentials)
            logger.info(f"GCS client initialized with service account: {credentials_path}")
        else:
            # Default credentials (GCE, Cloud Run, workload identity)
            _gcs_client = storage.Client()
            logger.info("GCS client initialized with default credentials")
    except Exception as e:
        logger.warning(f"Could not initialize GCS client: {e}")
        _gcs_client = None
        _gcs_bucket = None
        return None

    _gcs_bucket = _gcs_client.bucket(bucket_name)

    try:
        if not _gcs_bucket.exists():
            logger.warning(f"GCS bucket '{bucket_name}' does not exist")
            _gcs_bucket = None
            return None
    except Exception as e:
        # Bucket might exist but we lack permission to check
        logger.warning(f"Could not verify bucket existence: {e}")

    logger.info(f"GCS initialized successfully with bucket: {bucket_name}")
    return _gcs_bucket


def is_gcs_enabled() -> bool:
    """Check if GCS integration is enabled and configured."""
    return _gcs_client is not None and _gcs_bucket is not None


def gcs_health_check() -> bool:
    """
    Perform health check on GCS connection.

    Returns:
        True if GCS is healthy, False otherwise
    """
    if not is_gcs_enabled():
        return False

    try:
        return _gcs_bucket.exists()
    except Exception as e:
        logger.warning(f"GCS health check failed: {e}")
        return False
