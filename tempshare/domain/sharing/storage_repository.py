"""
Object Store Interface

Abstract interface for the byte layer behind shared objects.
The domain stays infrastructure-agnostic: the store knows nothing about
expiry, ownership or passwords and only resolves opaque locators to bytes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import BinaryIO, Iterator, Optional


class IObjectStore(ABC):
    """
    Byte-addressable store keyed by opaque locators.

    Contract Guarantees:
    - Locators are assigned by put() and never collide
    - get() raises BlobNotFoundError for unknown locators
    - delete() succeeds even if the locator is already gone (idempotent)
    - exists() and get_size() never raise for unknown locators

    Thread Safety:
    - Implementations must tolerate concurrent put/get/delete calls
    """

    @abstractmethod
    def put(self, content: BinaryIO, suffix: str = "") -> str:
        """
        Store a byte stream under a newly generated locator.

        Args:
            content: Binary stream positioned at the start of the data
            suffix: Optional file extension hint (e.g. '.pdf')

        Returns:
            Locator for the stored bytes

        Raises:
            IOError: If the bytes could not be written
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, locator: str) -> BinaryIO:
        """
        Open the bytes behind a locator for reading.

        The caller is responsible for closing the returned stream.

        Raises:
            BlobNotFoundError: If nothing is stored under the locator
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, locator: str) -> bool:
        """
        Remove the bytes behind a locator.

        Returns:
            True if the bytes were removed or were already absent

        Raises:
            IOError: If removal failed
        """
        pass  # pragma: no cover

    @abstractmethod
    def exists(self, locator: str) -> bool:
        pass  # pragma: no cover

    @abstractmethod
    def get_size(self, locator: str) -> Optional[int]:
        """Size in bytes, or None if nothing is stored under the locator."""
        pass  # pragma: no cover

    @abstractmethod
    def list_locators(self, older_than: datetime) -> Iterator[str]:
        """
        Yield locators of stored bytes last written before ``older_than``.

        Used by the orphan scan to find bytes no record references.
        """
        pass  # pragma: no cover
