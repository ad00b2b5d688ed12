"""
Google Cloud Storage Object Store Implementation

Concrete implementation of IObjectStore backed by a GCS bucket.
"""

import logging
import secrets
from datetime import datetime
from typing import BinaryIO, Iterator, Optional

from google.api_core.exceptions import PreconditionFailed
from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError, NotFound

from tempshare.domain.errors import BlobNotFoundError
from tempshare.domain.sharing.storage_repository import IObjectStore

logger = logging.getLogger(__name__)


class GCSObjectStore(IObjectStore):
    """
    Google Cloud Storage implementation of IObjectStore.

    Uploads use ``if_generation_match=0`` so a write can only create a new
    blob, never overwrite one.

    Attributes:
        bucket_name: Name of the GCS bucket
        prefix: Blob name prefix that scopes this store inside the bucket
    """

    def __init__(self, bucket_name: str, prefix: str = "objects",
                 client: Optional[storage.Client] = None):
        """
        Initialize the GCS object store.

        Args:
            bucket_name: Name of the GCS bucket to use for storage
            prefix: Blob name prefix for every locator
            client: Optional preconfigured storage client

        Raises:
            ValueError: If bucket_name is empty
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("bucket_name cannot be empty")

        self.bucket_name = bucket_name
        self.prefix = prefix.strip("/")
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)

    def _blob_name(self, locator: str) -> str:
        return f"{self.prefix}/{locator}" if self.prefix else locator

    def _locator(self, blob_name: str) -> str:
        if self.prefix:
            return blob_name[len(self.prefix) + 1:]
        return blob_name

    def put(self, content: BinaryIO, suffix: str = "", attempts: int = 5) -> str:
        """
        Upload content under a fresh locator.

        Raises:
            IOError: If the upload failed
        """
        for _ in range(attempts):
            locator = f"{secrets.token_hex(1)}/{secrets.token_hex(16)}{suffix}"
            blob = self.bucket.blob(self._blob_name(locator))
            try:
                blob.upload_from_file(content, if_generation_match=0, rewind=True)
                return locator
            except PreconditionFailed:
                logger.warning(f"Locator collision on {locator}, regenerating")
            except GoogleCloudError as e:
                raise IOError(f"Failed to upload object to GCS: {e}") from e

        raise IOError("Could not allocate a unique storage locator")

    def get(self, locator: str) -> BinaryIO:
        blob = self.bucket.get_blob(self._blob_name(locator)) if locator else None
        if blob is None:
            raise BlobNotFoundError(f"No bytes stored at {locator!r}")
        return blob.open("rb")

    def delete(self, locator: str) -> bool:
        """
        Delete the blob behind a locator. Missing blobs count as deleted.

        Raises:
            IOError: If GCS rejected the delete
        """
        if not locator:
            return True
        try:
            self.bucket.blob(self._blob_name(locator)).delete()
        except NotFound:
            return True
        except GoogleCloudError as e:
            raise IOError(f"Failed to delete object from GCS: {e}") from e
        return True

    def exists(self, locator: str) -> bool:
        if not locator:
            return False
        try:
            return self.bucket.blob(self._blob_name(locator)).exists()
        except GoogleCloudError:
            return False

    def get_size(self, locator: str) -> Optional[int]:
        if not locator:
            return None
        try:
            blob = self.bucket.get_blob(self._blob_name(locator))
        except GoogleCloudError:
            return None
        return blob.size if blob is not None else None

    def list_locators(self, older_than: datetime) -> Iterator[str]:
        prefix = f"{self.prefix}/" if self.prefix else None
        for blob in self.client.list_blobs(self.bucket_name, prefix=prefix):
            if blob.updated is not None and blob.updated < older_than:
                yield self._locator(blob.name)
