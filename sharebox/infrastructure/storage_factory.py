"""
Storage Factory

Factory for creating the blob store implementation.

Uses Google Cloud Storage when a bucket is configured and reachable,
and falls back to the local filesystem otherwise. The application layer
stays decoupled from the concrete implementation via `IBlobStore`.
"""

import logging

from sharebox.config.gcs_config import init_gcs
from sharebox.config.share_config import ShareConfig
from sharebox.domain.file_storage.blob_store import IBlobStore
from sharebox.domain.file_storage.signed_url_service import SignedUrlService

from .gcs_blob_store import GCSBlobStore
from .local_blob_store import LocalBlobStore

logger = logging.getLogger(__name__)


class StorageFactory:
    """Factory that returns the configured blob store."""

    @staticmethod
    def create_storage(config: ShareConfig, signer: SignedUrlService) -> IBlobStore:
        """
        Create the blob store for this deployment.

        Args:
            config: Share configuration (bucket name, storage directory)
            signer: Signed URL service used by the local store

        Returns:
            GCSBlobStore or LocalBlobStore

        Raises:
            RuntimeError: If local storage initialization fails
        """
        if config.bucket_name:
            bucket = init_gcs(config.bucket_name)
            if bucket is not None:
                logger.info(f"Storage factory: using GCS bucket {config.bucket_name}")
                return GCSBlobStore(bucket)
            logger.warning("Storage factory: GCS unavailable, falling back to local storage")

        return StorageFactory._create_local_storage(config, signer)

    @staticmethod
    def _create_local_storage(config: ShareConfig, signer: SignedUrlService) -> IBlobStore:
        try:
            storage = LocalBlobStore(config.storage_dir, signer)
            logger.info(f"Storage factory: using local filesystem storage at {config.storage_dir}")
            return storage
        except Exception as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e
