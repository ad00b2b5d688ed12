"""
Storage Factory

Selects the object store backend from configuration so the application
layer depends only on the IObjectStore interface.
"""

import logging

from tempshare.config.share_config import ShareConfig
from tempshare.domain.sharing.storage_repository import IObjectStore

from .local_object_store import LocalObjectStore

logger = logging.getLogger(__name__)


class StorageFactory:
    """
    Factory for object store implementations.

    Selection Logic:
    - If GCS_BUCKET_NAME is configured, use a GCS bucket
    - Otherwise, use the local filesystem under STORAGE_DIR
    """

    @staticmethod
    def create_store(config: ShareConfig) -> IObjectStore:
        """
        Create the object store for the given configuration.

        Raises:
            RuntimeError: If the selected backend cannot be initialized
        """
        if config.gcs_bucket_name:
            return StorageFactory._create_gcs_store(config.gcs_bucket_name)
        return StorageFactory._create_local_store(config.storage_dir)

    @staticmethod
    def _create_local_store(storage_dir: str) -> IObjectStore:
        try:
            store = LocalObjectStore(storage_dir)
        except OSError as e:
            raise RuntimeError(f"Failed to initialize local storage: {e}") from e

        logger.info(f"Using local object store at {storage_dir}")
        return store

    @staticmethod
    def _create_gcs_store(bucket_name: str) -> IObjectStore:
        # Imported lazily so local deployments need no GCP credentials
        from .gcs_object_store import GCSObjectStore

        try:
            store = GCSObjectStore(bucket_name)
        except Exception as e:
            raise RuntimeError(f"Failed to initialize GCS storage: {e}") from e

        logger.info(f"Using GCS object store with bucket {bucket_name}")
        return store
